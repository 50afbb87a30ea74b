"""Performance sentinel schemas and budgets."""

from __future__ import annotations

import os
from time import perf_counter
from typing import Callable, Dict, Tuple

from schemaloom.kernel import builders as t
from schemaloom.kernel.capability import has_type
from schemaloom.kernel.coercions import coerce_form_data, string_to_structure_coercions
from schemaloom.kernel.compiler import compile_schema
from schemaloom.kernel.nodes import ObjectNode
from schemaloom.kernel.replace import replace_schema


def _budget_from_env(var_name: str, default_ms: float) -> float:
    raw = os.getenv(var_name)
    if not raw:
        return default_ms
    try:
        return float(raw)
    except ValueError:
        return default_ms


MAX_DEEP_NESTING_MS = _budget_from_env("SCHEMALOOM_MAX_DEEP_NESTING_MS", 250.0)
MAX_WIDE_OBJECT_MS = _budget_from_env("SCHEMALOOM_MAX_WIDE_OBJECT_MS", 250.0)
MAX_REWRITE_MS = _budget_from_env("SCHEMALOOM_MAX_REWRITE_MS", 500.0)
MAX_COMPILE_MS = _budget_from_env("SCHEMALOOM_MAX_COMPILE_MS", 500.0)


def deep_object(depth: int, leaf=None) -> ObjectNode:
    """Object nested `depth` levels through a `child` property; the innermost holds `leaf`."""
    node = t.obj({"value": leaf if leaf is not None else t.string()})
    for _ in range(depth - 1):
        node = t.obj({"child": node})
    return node


def wide_object(width: int, last=None) -> ObjectNode:
    """Object with `width` string properties; the last one is `last` when given."""
    properties = {f"field_{i}": t.string() for i in range(width)}
    if last is not None:
        properties[f"field_{width - 1}"] = last
    return t.obj(properties)


def _sentinels() -> Dict[str, Callable[[], object]]:
    deep = deep_object(200, t.file())
    wide = wide_object(2000, t.file())
    nested_wide = t.obj({f"group_{i}": wide_object(50) for i in range(40)})
    return {
        "deep_nesting": lambda: has_type("File", deep),
        "wide_object": lambda: has_type("File", wide),
        "rewrite": lambda: replace_schema(nested_wide, string_to_structure_coercions()),
        "form_data": lambda: replace_schema(deep, coerce_form_data()),
        "compile": lambda: compile_schema(nested_wide).check({}),
    }


def run_sentinel_case(case: str) -> Tuple[float, object]:
    """Run one sentinel and return elapsed ms plus its result."""
    operation = _sentinels()[case]
    start = perf_counter()
    result = operation()
    elapsed_ms = (perf_counter() - start) * 1000.0
    return elapsed_ms, result
