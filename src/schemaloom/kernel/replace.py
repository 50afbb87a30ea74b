"""Policy-driven schema rewriting.

A rule names a pattern node (`source`) and a replacement function (`to`).
Nodes whose structural kind and coercion tag agree with the pattern are
replaced; constraints and other metadata are ignored when matching.

Traversal is depth-first and top-down over an explicit stack. Flags on the
rule control where matching happens:

- root_only: test the root only, never descend.
- exclude_root: never match the root, still rewrite beneath it.
- only_first: once a node of that structural kind is replaced, nothing
  beneath the replacement is rewritten, and its later siblings are matched
  at their own level but not descended into.
- until_object_found: a non-root Object ends the branch; it is replaced once
  if it matches, otherwise kept as-is.

Nodes carrying a coercion tag are terminal, so re-applying a coercion rule set
to its own output changes nothing. Input nodes are never mutated: changed
branches are rebuilt and unchanged sub-nodes are shared.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

import structlog

from schemaloom.codes import Kind
from schemaloom.kernel.errors import ReplaceConfigError
from schemaloom.kernel.nodes import ObjectNode, SchemaNode, structural_kind

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReplaceRule:
    """One rewrite rule."""
    source: SchemaNode  # Pattern: only kind and coercion tag are compared
    to: Callable[[SchemaNode], Optional[SchemaNode]]
    root_only: bool = False
    exclude_root: bool = False
    only_first: Optional[Kind] = None
    until_object_found: bool = False

    def __post_init__(self):
        if self.only_first is not None and not isinstance(self.only_first, Kind):
            object.__setattr__(self, "only_first", Kind.parse(self.only_first))

    def validate(self) -> None:
        """Raise ReplaceConfigError when root_only is combined with another flag."""
        if not self.root_only:
            return
        if self.exclude_root:
            raise ReplaceConfigError("root_only", "exclude_root")
        if self.only_first is not None:
            raise ReplaceConfigError("root_only", "only_first")
        if self.until_object_found:
            raise ReplaceConfigError("root_only", "until_object_found")

    def matches(self, node: SchemaNode) -> bool:
        return (
            node.coercion == self.source.coercion
            and structural_kind(node) is structural_kind(self.source)
        )


RuleLike = Union[ReplaceRule, Mapping[str, Any]]

# "from" is a keyword in Python; accept it as an alias in mapping rules
_RULE_ALIASES = {"from": "source", "from_": "source"}


def _as_rule(rule: RuleLike) -> ReplaceRule:
    if isinstance(rule, ReplaceRule):
        return rule
    fields = {_RULE_ALIASES.get(key, key): value for key, value in dict(rule).items()}
    return ReplaceRule(**fields)


def _as_rules(rules: Union[RuleLike, Iterable[RuleLike]]) -> Tuple[ReplaceRule, ...]:
    if isinstance(rules, (ReplaceRule, Mapping)):
        return (_as_rule(rules),)
    return tuple(_as_rule(rule) for rule in rules)


class _Frame:
    """A node whose children are being rewritten."""
    __slots__ = ("node", "matched", "children", "results", "halted")

    def __init__(self, node: SchemaNode, matched: bool, children: Tuple[Optional[SchemaNode], ...]):
        self.node = node
        self.matched = matched
        self.children = children
        self.results: List[Optional[SchemaNode]] = []
        self.halted = False  # Set once a child of the only_first kind was replaced


def _apply_rule(root: Any, rule: ReplaceRule) -> Any:
    """Run one rule over the whole tree."""
    if not isinstance(root, SchemaNode):
        return root

    if rule.root_only:
        return rule.to(root) if rule.matches(root) else root

    done: Dict[int, Any] = {}  # id(input node) -> rewritten result
    active: Set[int] = set()  # ids of nodes on the current stack

    def halts(node: Any) -> bool:
        return (
            rule.only_first is not None
            and isinstance(node, SchemaNode)
            and node.coercion is None
            and id(node) not in active
            and structural_kind(node) is rule.only_first
            and rule.matches(node)
        )

    def enter(node: Any, is_root: bool, halted: bool = False) -> Tuple[Optional[_Frame], Any]:
        """Rewrite `node` immediately, or return a frame when its children must be visited."""
        if not isinstance(node, SchemaNode):
            return None, node
        key = id(node)
        if key in done:
            return None, done[key]
        if key in active or node.coercion is not None:
            return None, node

        matched = not (is_root and rule.exclude_root) and rule.matches(node)

        if halted:
            # Shallow result, not memoized: the node may be reached again unhalted
            return None, rule.to(node) if matched else node

        if rule.until_object_found and not is_root and isinstance(node, ObjectNode):
            result = rule.to(node) if matched else node
            done[key] = result
            return None, result

        if matched and rule.only_first is not None and structural_kind(node) is rule.only_first:
            result = rule.to(node)
            done[key] = result
            return None, result

        children = node.children()
        if not children:
            result = rule.to(node) if matched else node
            done[key] = result
            return None, result

        active.add(key)
        return _Frame(node, matched, children), None

    def leave(frame: _Frame) -> Any:
        node = frame.node
        active.discard(id(node))
        if any(new is not old for new, old in zip(frame.results, frame.children)):
            node = node.with_children(frame.results)
        result = rule.to(node) if frame.matched else node
        done[id(frame.node)] = result
        return result

    frame, result = enter(root, True)
    if frame is None:
        return result

    stack: List[_Frame] = [frame]
    while True:
        top = stack[-1]
        if len(top.results) < len(top.children):
            child = top.children[len(top.results)]
            child_frame, child_result = enter(child, False, top.halted)
            if halts(child):
                top.halted = True
            if child_frame is None:
                top.results.append(child_result)
            else:
                stack.append(child_frame)
            continue

        stack.pop()
        result = leave(top)
        if not stack:
            return result
        stack[-1].results.append(result)


def replace_schema(schema: Any, rules: Union[RuleLike, Iterable[RuleLike]]) -> Any:
    """Rewrite `schema` with one rule or a sequence of rules.

    All rules are checked for conflicting flags before any traversal. Rules
    are applied as sequential whole-tree passes, each over the previous
    result. Returns None for None input; non-node input is returned as-is.
    A replacement function returning None leaves None in that position.

    Raises:
        ReplaceConfigError: If a rule sets root_only together with
            exclude_root, only_first or until_object_found.
    """
    rule_set = _as_rules(rules)
    for rule in rule_set:
        rule.validate()

    if schema is None:
        return None

    result = schema
    for index, rule in enumerate(rule_set):
        result = _apply_rule(result, rule)
        logger.debug(
            "replace_schema.pass",
            rule=index,
            source_kind=rule.source.kind.value,
            changed=result is not schema,
        )
    return result
