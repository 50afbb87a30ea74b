"""Resolve schema names against layered registries."""

from typing import Any, Dict, Mapping, Optional

from schemaloom.kernel.nodes import RefNode, SchemaNode


def resolve_schema(
    schema: Any,
    models: Optional[Mapping[str, Any]] = None,
    modules: Optional[Mapping[str, Any]] = None,
) -> Any:
    """Resolve a schema name, or pass a concrete schema through.

    Names are looked up in `modules` first, then in `models`. Returns None
    when the name is defined in neither. Missing registries are not errors.
    """
    if not isinstance(schema, str):
        return schema

    if modules and schema in modules:
        return modules[schema]

    if models:
        return models.get(schema)
    return None


class SchemaRegistry:
    """Named models plus the compiled module namespace built from them.

    `models` holds flat user registrations. `compile()` produces `modules`:
    each model name mapped to a RefNode over a shared definitions table, so
    models may reference each other (and themselves) by name.
    """

    def __init__(self, models: Optional[Mapping[str, Any]] = None):
        self.models: Dict[str, Any] = dict(models or {})
        self.modules: Dict[str, Any] = {}
        self._defs: Dict[str, SchemaNode] = {}

    def model(self, name: str, schema: Any) -> "SchemaRegistry":
        """Register a model under `name`; returns self for chaining."""
        self.models[name] = schema
        return self

    def ref(self, name: str) -> RefNode:
        """Reference a model by name, resolved lazily at use time."""
        return RefNode(name, self._defs)

    def compile(self) -> Dict[str, Any]:
        """Rebuild the module namespace from the registered models.

        Native nodes become references into the shared definitions table;
        foreign schemas are exposed as-is.
        """
        self._defs.clear()
        modules: Dict[str, Any] = {}
        for name, schema in self.models.items():
            if isinstance(schema, SchemaNode):
                self._defs[name] = schema
                modules[name] = RefNode(name, self._defs)
            else:
                modules[name] = schema
        self.modules = modules
        return modules

    def resolve(self, schema: Any) -> Any:
        """resolve_schema() against this registry's modules and models."""
        return resolve_schema(schema, self.models, self.modules)
