from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from tests.support.harness import PROGRAMS_DIR, LxError, run_program


def _programs(kind: str) -> List[Path]:
    return sorted((PROGRAMS_DIR / kind).glob("*.lx"))


def _directive(path: Path, key: str) -> str:
    first = path.read_text(encoding="utf-8").splitlines()[0]
    prefix = f"# {key}:"
    assert first.startswith(prefix), f"{path.name} must start with '{prefix}'"
    return first[len(prefix):].strip()


@pytest.mark.parametrize("path", _programs("pass"), ids=lambda p: p.stem)
def test_passing_programs(path: Path) -> None:
    result = run_program(path.read_bytes())
    assert repr(result) == _directive(path, "expect")


@pytest.mark.parametrize("path", _programs("fail"), ids=lambda p: p.stem)
def test_failing_programs(path: Path) -> None:
    expected = _directive(path, "error")
    with pytest.raises(LxError) as info:
        run_program(path.read_bytes())
    assert type(info.value).__name__ == expected
