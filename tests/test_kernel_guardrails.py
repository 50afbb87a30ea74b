"""Guardrails to keep the kernel free of side effects and I/O."""

import re
from pathlib import Path


FORBIDDEN_PATTERNS = {
    "argparse": re.compile(r"\bargparse\b"),
    "pathlib": re.compile(r"\bpathlib\b"),
    "open(": re.compile(r"(?<![A-Za-z0-9_.])open\s*\("),
    "print(": re.compile(r"(?<![A-Za-z0-9_])print\s*\("),
    "os.environ": re.compile(r"\bos\.(environ|getenv)\b"),
    "datetime.now": re.compile(r"\bdatetime\.now\b"),
    "time.time": re.compile(r"\btime\.time\b"),
    "sys.setrecursionlimit": re.compile(r"\bsetrecursionlimit\b"),
}


def test_kernel_has_no_forbidden_tokens():
    kernel_dir = Path(__file__).resolve().parents[1] / "src" / "schemaloom" / "kernel"
    offenders = []

    for path in kernel_dir.glob("*.py"):
        contents = path.read_text(encoding="utf-8")
        for token, pattern in FORBIDDEN_PATTERNS.items():
            if pattern.search(contents):
                offenders.append(f"{path.name}: {token}")

    assert not offenders, "Forbidden kernel tokens found: " + ", ".join(offenders)


def test_kernel_does_not_import_internal_or_adapter():
    """Kernel modules must not depend on the bridge or the strategy layer."""
    kernel_dir = Path(__file__).resolve().parents[1] / "src" / "schemaloom" / "kernel"
    pattern = re.compile(r"^\s*(from|import)\s+schemaloom\.(_internal|adapter|api)\b", re.MULTILINE)

    offenders = [path.name for path in kernel_dir.glob("*.py") if pattern.search(path.read_text(encoding="utf-8"))]

    assert not offenders, "Kernel imports outer layers: " + ", ".join(offenders)
