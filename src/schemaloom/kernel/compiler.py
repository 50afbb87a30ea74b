"""Compile native schema trees into validator closures.

Compilation runs in two phases. Reachable nodes are first collected with an
explicit work list, and an empty program is created for each one; then every
program is filled with closures that call their children's programs through
attribute lookup. A child program may therefore still be empty while its
parent is filled, which is what makes directly self-referential graphs
compile. References are compiled lazily, on first use. Their programs are
published to the shared table only after they are filled.

Issue paths are JSON pointers ("/user/tags/0"); the root is "/".
"""

import json
import math
import re
import uuid
from collections import ChainMap
from collections.abc import Mapping
from datetime import date, datetime
from itertools import islice
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from pydantic import AnyUrl, EmailStr, TypeAdapter, ValidationError

from schemaloom.codes import Kind, IssueCode
from schemaloom.contracts import ValidationIssue
from schemaloom.kernel.coercions import NUMERIC_PATTERN
from schemaloom.kernel.errors import DecodeError, EncodeError, UnsupportedSchemaError
from schemaloom.kernel.nodes import (
    ArrayNode,
    CompositionNode,
    ForeignNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaNode,
    WrapperNode,
)
from schemaloom.kernel.standard import read_result, standard_validate_of


def _issue(code: IssueCode, message: str, path: str) -> ValidationIssue:
    return ValidationIssue(message=message, path=path or "/", code=code)


def _pointer(path: str, key: Any) -> str:
    return f"{path}/{str(key).replace('~', '~0').replace('/', '~1')}"


def _identity(value: Any, path: str = "") -> Any:
    return value


# -- formats -----------------------------------------------------------------

_NUMERIC_RE = re.compile(NUMERIC_PATTERN)


def _is_uuid(text: str) -> bool:
    try:
        uuid.UUID(text)
    except ValueError:
        return False
    return True


def _is_date_time(text: str) -> bool:
    if "T" not in text and " " not in text:
        return False
    try:
        datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def _is_date(text: str) -> bool:
    try:
        date.fromisoformat(text)
    except ValueError:
        return False
    return True


def _accepted_by(adapter: TypeAdapter) -> Callable[[str], bool]:
    def check(text: str) -> bool:
        try:
            adapter.validate_python(text)
        except ValidationError:
            return False
        return True
    return check


def _is_json_of(kind: type) -> Callable[[str], bool]:
    def check(text: str) -> bool:
        try:
            return isinstance(json.loads(text), kind)
        except ValueError:
            return False
    return check


FORMATS: Dict[str, Callable[[str], bool]] = {
    "email": _accepted_by(TypeAdapter(EmailStr)),
    "uuid": _is_uuid,
    "uri": _accepted_by(TypeAdapter(AnyUrl)),
    "date": _is_date,
    "date-time": _is_date_time,
    "ObjectString": _is_json_of(dict),
    "ArrayString": _is_json_of(list),
    "ArrayQuery": lambda text: True,
    "boolean": lambda text: text.lower() in ("true", "false"),
    "numeric": lambda text: bool(_NUMERIC_RE.match(text)),
}


# -- primitive type checks ---------------------------------------------------

def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or (isinstance(value, float) and math.isfinite(value))


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or (isinstance(value, float) and value.is_integer())


def _is_file(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview)) or callable(getattr(value, "read", None))


_TYPE_CHECKS: Dict[Kind, Callable[[Any], bool]] = {
    Kind.STRING: lambda value: isinstance(value, str),
    Kind.NUMBER: _is_number,
    Kind.INTEGER: _is_integer,
    Kind.BOOLEAN: lambda value: isinstance(value, bool),
    Kind.NULL: lambda value: value is None,
    Kind.ANY: lambda value: True,
    Kind.NEVER: lambda value: False,
    Kind.FILE: _is_file,
}


def _unique(items: List[Any]) -> bool:
    seen = []
    for item in items:
        if item in seen:
            return False
        seen.append(item)
    return True


class _Program:
    """Compiled form of one schema node. Filled in after registration."""
    __slots__ = ("check", "errors", "decode", "encode")

    def __init__(self):
        self.check: Callable[[Any], bool]
        self.errors: Callable[[Any, str], Iterator[ValidationIssue]]
        self.decode: Callable[[Any, str], Any]
        self.encode: Callable[[Any], Any]


Rule = Tuple[Callable[[Any], bool], IssueCode, str]


class _Compiler:
    """Program table for one compiled schema (and everything it references)."""

    def __init__(self):
        self._programs: Dict[int, _Program] = {}
        self._keep: List[Any] = []  # Keeps compiled schema objects alive so ids stay unique

    def program_for(self, schema: Any) -> _Program:
        """Return the filled program for `schema`, compiling it if needed.

        New programs are built in a private table and published to the
        shared one only once all of them are filled, so a concurrent caller
        never sees an empty program. When two callers race on the same
        node the first published program wins.
        """
        key = id(schema)
        program = self._programs.get(key)
        if program is not None:
            return program

        fresh: Dict[int, _Program] = {}
        table = ChainMap(fresh, self._programs)
        pending: List[Any] = []
        stack = [schema]
        while stack:
            current = stack.pop()
            if id(current) in table:
                continue
            fresh[id(current)] = _Program()
            self._keep.append(current)
            pending.append(current)
            if isinstance(current, WrapperNode) and current.codec is not None and current.codec.output is not None:
                stack.append(current.codec.output)
            if isinstance(current, SchemaNode):
                for child in current.children():
                    if child is not None and id(child) not in table:
                        stack.append(child)

        for current in pending:
            self._fill(fresh[id(current)], current, table)
        for node_id, program in fresh.items():
            self._programs.setdefault(node_id, program)
        return self._programs[key]

    def _fill(self, program: _Program, node: Any, table: Mapping[int, _Program]) -> None:
        if isinstance(node, PrimitiveNode):
            self._fill_primitive(program, node)
        elif isinstance(node, ObjectNode):
            self._fill_object(program, node, table)
        elif isinstance(node, ArrayNode):
            self._fill_array(program, node, table)
        elif isinstance(node, CompositionNode):
            self._fill_composition(program, node, table)
        elif isinstance(node, WrapperNode):
            self._fill_wrapper(program, node, table)
        elif isinstance(node, RefNode):
            self._fill_ref(program, node)
        elif isinstance(node, ForeignNode):
            self._fill_foreign(program, node.payload)
        else:
            self._fill_foreign(program, node)

    # -- leaves --------------------------------------------------------------

    def _constraint_rules(self, node: PrimitiveNode) -> List[Rule]:
        c = node.constraints
        rules: List[Rule] = []
        if node.kind is Kind.STRING:
            if c.min_length is not None:
                rules.append((lambda v, n=c.min_length: len(v) >= n, IssueCode.TOO_SHORT,
                              f"Expected string length greater or equal to {c.min_length}"))
            if c.max_length is not None:
                rules.append((lambda v, n=c.max_length: len(v) <= n, IssueCode.TOO_LONG,
                              f"Expected string length less or equal to {c.max_length}"))
            if c.pattern is not None:
                regex = re.compile(c.pattern)
                rules.append((lambda v: regex.search(v) is not None, IssueCode.PATTERN_MISMATCH,
                              f"Expected string to match '{c.pattern}'"))
            if c.format is not None and c.format in FORMATS:
                fmt = FORMATS[c.format]
                rules.append((fmt, IssueCode.INVALID_FORMAT, f"Expected string to match '{c.format}' format"))
        elif node.kind in (Kind.NUMBER, Kind.INTEGER):
            if c.minimum is not None:
                rules.append((lambda v, n=c.minimum: v >= n, IssueCode.TOO_SMALL,
                              f"Expected number to be greater or equal to {c.minimum:g}"))
            if c.maximum is not None:
                rules.append((lambda v, n=c.maximum: v <= n, IssueCode.TOO_BIG,
                              f"Expected number to be less or equal to {c.maximum:g}"))
            if c.exclusive_minimum is not None:
                rules.append((lambda v, n=c.exclusive_minimum: v > n, IssueCode.TOO_SMALL,
                              f"Expected number to be greater than {c.exclusive_minimum:g}"))
            if c.exclusive_maximum is not None:
                rules.append((lambda v, n=c.exclusive_maximum: v < n, IssueCode.TOO_BIG,
                              f"Expected number to be less than {c.exclusive_maximum:g}"))
            if c.multiple_of:
                rules.append((lambda v, n=c.multiple_of: math.isclose(math.remainder(v, n), 0.0, abs_tol=1e-9),
                              IssueCode.NOT_MULTIPLE, f"Expected number to be a multiple of {c.multiple_of:g}"))
        if c.enum is not None:
            allowed = c.enum
            rules.append((lambda v: v in allowed, IssueCode.NOT_IN_ENUM,
                          f"Expected one of {', '.join(repr(a) for a in allowed)}"))
        return rules

    def _fill_primitive(self, program: _Program, node: PrimitiveNode) -> None:
        type_ok = _TYPE_CHECKS[node.kind]
        rules = self._constraint_rules(node)
        expected = node.kind.value.lower()

        def check(value):
            return type_ok(value) and all(ok(value) for ok, _, _ in rules)

        def errors(value, path):
            if node.kind is Kind.NEVER:
                yield _issue(IssueCode.NEVER, "Never", path)
                return
            if not type_ok(value):
                yield _issue(IssueCode.INVALID_TYPE, f"Expected {expected}", path)
                return
            for ok, code, message in rules:
                if not ok(value):
                    yield _issue(code, message, path)

        program.check = check
        program.errors = errors
        program.decode = _identity
        program.encode = _identity

    # -- structures ----------------------------------------------------------

    def _fill_object(self, program: _Program, node: ObjectNode, table: Mapping[int, _Program]) -> None:
        props = [
            (name, table[id(child)],
             isinstance(child, WrapperNode) and child.kind is Kind.OPTIONAL)
            for name, child in node.properties.items()
            if child is not None
        ]
        declared = frozenset(name for name, _, _ in props)
        closed = not node.additional_properties

        def check(value):
            if not isinstance(value, Mapping):
                return False
            for name, prop, optional in props:
                if name in value:
                    if not prop.check(value[name]):
                        return False
                elif not optional:
                    return False
            if closed and any(key not in declared for key in value):
                return False
            return True

        def errors(value, path):
            if not isinstance(value, Mapping):
                yield _issue(IssueCode.INVALID_TYPE, "Expected object", path)
                return
            for name, prop, optional in props:
                if name in value:
                    yield from prop.errors(value[name], _pointer(path, name))
                elif not optional:
                    yield _issue(IssueCode.MISSING_PROPERTY, f"Expected required property '{name}'",
                                 _pointer(path, name))
            if closed:
                for key in value:
                    if key not in declared:
                        yield _issue(IssueCode.UNEXPECTED_PROPERTY, f"Unexpected property '{key}'",
                                     _pointer(path, key))

        def decode(value, path):
            result = dict(value)
            for name, prop, _ in props:
                if name in value:
                    result[name] = prop.decode(value[name], _pointer(path, name))
            return result

        def encode(value):
            if not isinstance(value, Mapping):
                return value
            result = dict(value)
            for name, prop, _ in props:
                if name in value:
                    result[name] = prop.encode(value[name])
            return result

        program.check = check
        program.errors = errors
        program.decode = decode
        program.encode = encode

    def _fill_array(self, program: _Program, node: ArrayNode, table: Mapping[int, _Program]) -> None:
        items = None if node.items is None else table[id(node.items)]
        min_items, max_items, unique = node.min_items, node.max_items, node.unique_items

        def check(value):
            if not isinstance(value, (list, tuple)):
                return False
            if min_items is not None and len(value) < min_items:
                return False
            if max_items is not None and len(value) > max_items:
                return False
            if unique and not _unique(list(value)):
                return False
            return items is None or all(items.check(item) for item in value)

        def errors(value, path):
            if not isinstance(value, (list, tuple)):
                yield _issue(IssueCode.INVALID_TYPE, "Expected array", path)
                return
            if min_items is not None and len(value) < min_items:
                yield _issue(IssueCode.TOO_FEW_ITEMS, f"Expected array length to be greater or equal to {min_items}", path)
            if max_items is not None and len(value) > max_items:
                yield _issue(IssueCode.TOO_MANY_ITEMS, f"Expected array length to be less or equal to {max_items}", path)
            if unique and not _unique(list(value)):
                yield _issue(IssueCode.DUPLICATE_ITEMS, "Expected array elements to be unique", path)
            if items is not None:
                for index, item in enumerate(value):
                    yield from items.errors(item, _pointer(path, index))

        def decode(value, path):
            if items is None:
                return list(value)
            return [items.decode(item, _pointer(path, index)) for index, item in enumerate(value)]

        def encode(value):
            if items is None or not isinstance(value, (list, tuple)):
                return value
            return [items.encode(item) for item in value]

        program.check = check
        program.errors = errors
        program.decode = decode
        program.encode = encode

    def _fill_composition(self, program: _Program, node: CompositionNode, table: Mapping[int, _Program]) -> None:
        branches = [table[id(branch)] for branch in node.branches if branch is not None]

        if node.kind is Kind.ALL_OF:
            def check(value):
                return all(branch.check(value) for branch in branches)

            def errors(value, path):
                for branch in branches:
                    yield from branch.errors(value, path)

            def decode(value, path):
                for branch in branches:
                    value = branch.decode(value, path)
                return value

            def encode(value):
                for branch in reversed(branches):
                    value = branch.encode(value)
                return value

        else:
            exclusive = node.kind is Kind.ONE_OF

            def matching(value):
                return [branch for branch in branches if branch.check(value)]

            def check(value):
                if exclusive:
                    return len(matching(value)) == 1
                return any(branch.check(value) for branch in branches)

            def errors(value, path):
                if exclusive:
                    count = len(matching(value))
                    if count == 0:
                        yield _issue(IssueCode.NO_UNION_MATCH, "Expected value of one of the alternatives", path)
                    elif count > 1:
                        yield _issue(IssueCode.AMBIGUOUS_ONE_OF,
                                     f"Expected value to match exactly one alternative, matched {count}", path)
                elif not any(branch.check(value) for branch in branches):
                    yield _issue(IssueCode.NO_UNION_MATCH, "Expected union value", path)

            def decode(value, path):
                for branch in branches:
                    if branch.check(value):
                        return branch.decode(value, path)
                return value

            def encode(value):
                for branch in branches:
                    if branch.check(value):
                        return branch.encode(value)
                return value

        program.check = check
        program.errors = errors
        program.decode = decode
        program.encode = encode

    def _fill_wrapper(self, program: _Program, node: WrapperNode, table: Mapping[int, _Program]) -> None:
        inner = None if node.inner is None else table[id(node.inner)]
        if inner is None:
            program.check = lambda value: True
            program.errors = lambda value, path: iter(())
            program.decode = _identity
            program.encode = _identity
            return

        if node.kind is Kind.NULLABLE:
            program.check = lambda value: value is None or inner.check(value)
            program.errors = lambda value, path: iter(()) if value is None else inner.errors(value, path)
            program.decode = lambda value, path: None if value is None else inner.decode(value, path)
            program.encode = lambda value: None if value is None else inner.encode(value)
            return

        if node.kind is Kind.OPTIONAL:
            # Presence is decided by the enclosing object
            program.check = lambda value: inner.check(value)
            program.errors = lambda value, path: inner.errors(value, path)
            program.decode = lambda value, path: inner.decode(value, path)
            program.encode = lambda value: inner.encode(value)
            return

        codec = node.codec
        output = None if codec.output is None else table[id(codec.output)]

        def decode(value, path):
            try:
                decoded = codec.decode(value if output is not None else inner.decode(value, path))
            except (ValueError, TypeError) as exc:
                raise DecodeError([_issue(IssueCode.DECODE_FAILED, str(exc), path)]) from exc
            if output is None:
                return decoded
            if not output.check(decoded):
                raise DecodeError(list(output.errors(decoded, path)))
            return output.decode(decoded, path)

        def encode(value):
            return codec.encode(output.encode(value) if output is not None else value)

        program.check = lambda value: inner.check(value)
        program.errors = lambda value, path: inner.errors(value, path)
        program.decode = decode
        program.encode = encode

    # -- indirection ---------------------------------------------------------

    def _fill_ref(self, program: _Program, node: RefNode) -> None:
        resolved: List[_Program] = []

        def target() -> Optional[_Program]:
            if not resolved:
                schema = node.target
                if schema is None:
                    return None
                resolved.append(self.program_for(schema))
            return resolved[0]

        def unresolved(path):
            return _issue(IssueCode.UNRESOLVED_REF, f"Unable to resolve reference '{node.name}'", path)

        def check(value):
            prog = target()
            return prog is not None and prog.check(value)

        def errors(value, path):
            prog = target()
            if prog is None:
                yield unresolved(path)
                return
            yield from prog.errors(value, path)

        def decode(value, path):
            prog = target()
            if prog is None:
                raise DecodeError([unresolved(path)])
            return prog.decode(value, path)

        def encode(value):
            prog = target()
            return value if prog is None else prog.encode(value)

        program.check = check
        program.errors = errors
        program.decode = decode
        program.encode = encode

    def _fill_foreign(self, program: _Program, payload: Any) -> None:
        validate = standard_validate_of(payload)
        if validate is None:
            raise UnsupportedSchemaError(payload, "foreign node without a standard validate capability")

        def check(value):
            _, issues = read_result(validate(value))
            return issues is None

        def errors(value, path):
            _, issues = read_result(validate(value), path)
            if issues:
                yield from issues

        def decode(value, path):
            result, issues = read_result(validate(value), path)
            if issues:
                raise DecodeError(issues)
            return result

        program.check = check
        program.errors = errors
        program.decode = decode
        program.encode = _identity


class CompiledValidator:
    """Executable validator over a native schema tree.

    Safe for concurrent use: compiled programs are read-only closures.
    """

    kind = "compiled"

    def __init__(self, schema: SchemaNode):
        self.schema = schema
        self._program = _Compiler().program_for(schema)

    def check(self, value: Any) -> bool:
        return self._program.check(value)

    def errors(self, value: Any) -> Iterator[ValidationIssue]:
        """Lazily yield validation issues for `value`."""
        return self._program.errors(value, "")

    def first_error(self, value: Any) -> Optional[ValidationIssue]:
        return next(iter(self.errors(value)), None)

    def decode(self, value: Any, max_issues: Optional[int] = None) -> Any:
        """Validate the wire value and run codecs forwards.

        Raises:
            DecodeError: If the value fails the schema or a codec's output schema.
        """
        if not self._program.check(value):
            raise DecodeError(list(islice(self.errors(value), max_issues)))
        return self._program.decode(value, "")

    def encode(self, value: Any, max_issues: Optional[int] = None) -> Any:
        """Run codecs backwards and validate the resulting wire value.

        Raises:
            EncodeError: If the encoded value fails the schema.
        """
        encoded = self._program.encode(value)
        if not self._program.check(encoded):
            raise EncodeError(list(islice(self.errors(encoded), max_issues)))
        return encoded


def compile_schema(schema: SchemaNode) -> CompiledValidator:
    """Compile a native schema tree.

    Raises:
        UnsupportedSchemaError: If the tree holds a foreign node without a
            standard validate capability.
    """
    if not isinstance(schema, SchemaNode):
        raise UnsupportedSchemaError(schema, "not a native schema node")
    return CompiledValidator(schema)
