"""Performance sentinels (gated)."""

from __future__ import annotations

import pytest

from schemaloom._internal.benchmarks import (
    MAX_COMPILE_MS,
    MAX_DEEP_NESTING_MS,
    MAX_REWRITE_MS,
    MAX_WIDE_OBJECT_MS,
    run_sentinel_case,
)


def _assert_budget(benchmark, max_ms: float) -> None:
    mean_ms = benchmark.stats.stats.mean * 1000.0
    assert mean_ms < max_ms, f"Mean {mean_ms:.2f} ms exceeded budget {max_ms:.2f} ms"


@pytest.mark.perf
def test_deep_nesting_sentinel(benchmark):
    _, found = benchmark.pedantic(lambda: run_sentinel_case("deep_nesting"), rounds=3, iterations=1)

    assert found is True
    _assert_budget(benchmark, MAX_DEEP_NESTING_MS)


@pytest.mark.perf
def test_wide_object_sentinel(benchmark):
    _, found = benchmark.pedantic(lambda: run_sentinel_case("wide_object"), rounds=3, iterations=1)

    assert found is True
    _assert_budget(benchmark, MAX_WIDE_OBJECT_MS)


@pytest.mark.perf
def test_rewrite_sentinel(benchmark):
    _, result = benchmark.pedantic(lambda: run_sentinel_case("rewrite"), rounds=3, iterations=1)

    assert result.coercion is None
    _assert_budget(benchmark, MAX_REWRITE_MS)


@pytest.mark.perf
def test_form_data_sentinel(benchmark):
    benchmark.pedantic(lambda: run_sentinel_case("form_data"), rounds=3, iterations=1)

    _assert_budget(benchmark, MAX_REWRITE_MS)


@pytest.mark.perf
def test_compile_sentinel(benchmark):
    _, ok = benchmark.pedantic(lambda: run_sentinel_case("compile"), rounds=3, iterations=1)

    assert ok is False  # Every group is required
    _assert_budget(benchmark, MAX_COMPILE_MS)
