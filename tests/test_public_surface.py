"""Test public API surface - imports work and exports stay stable."""

import types


def test_package_exports():
    """The package root re-exports the engine operations."""
    import schemaloom

    for name in schemaloom.__all__:
        assert hasattr(schemaloom, name), name

    assert isinstance(schemaloom.has_type, types.FunctionType)
    assert isinstance(schemaloom.replace_schema, types.FunctionType)
    assert isinstance(schemaloom.to_validator, types.FunctionType)


def test_version():
    import schemaloom

    # In dev mode it's "dev", installed it's the project version
    assert schemaloom.__version__ in ("1.0.0", "dev")


def test_api_matches_root_exports():
    import schemaloom
    from schemaloom import api

    for name in ("resolve_schema", "replace_schema", "has_type", "to_validator", "has_bridge", "validate_value"):
        assert getattr(schemaloom, name) is getattr(api, name)


def test_kernel_modules_import():
    import schemaloom.kernel.builders  # noqa: F401
    import schemaloom.kernel.capability  # noqa: F401
    import schemaloom.kernel.coercions  # noqa: F401
    import schemaloom.kernel.compiler  # noqa: F401
    import schemaloom.kernel.replace  # noqa: F401
    import schemaloom.kernel.resolve  # noqa: F401


def test_errors_are_exported():
    from schemaloom import DecodeError, EncodeError, KernelError, ReplaceConfigError, UnsupportedSchemaError

    for error in (DecodeError, EncodeError, ReplaceConfigError, UnsupportedSchemaError):
        assert issubclass(error, KernelError)
