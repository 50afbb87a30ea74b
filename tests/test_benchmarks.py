"""Sentinel schemas produce the expected results (ungated; timing lives in tests/perf)."""

import pytest

from schemaloom._internal.benchmarks import _budget_from_env, deep_object, run_sentinel_case, wide_object
from schemaloom.kernel import builders as t
from schemaloom.kernel.capability import has_type


def test_deep_and_wide_builders():
    deep = deep_object(50, t.file())
    wide = wide_object(100, t.file())

    assert has_type("File", deep) is True
    assert has_type("File", wide) is True
    assert len(wide.properties) == 100


@pytest.mark.parametrize("case", ["deep_nesting", "wide_object"])
def test_sentinel_lookups_find_the_file(case):
    elapsed_ms, found = run_sentinel_case(case)

    assert found is True
    assert elapsed_ms >= 0.0


def test_budget_from_env(monkeypatch):
    monkeypatch.setenv("SCHEMALOOM_TEST_BUDGET", "12.5")
    assert _budget_from_env("SCHEMALOOM_TEST_BUDGET", 1.0) == 12.5

    monkeypatch.setenv("SCHEMALOOM_TEST_BUDGET", "fast")
    assert _budget_from_env("SCHEMALOOM_TEST_BUDGET", 1.0) == 1.0
