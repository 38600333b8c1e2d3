from __future__ import annotations

import pytest

from eucalyptus.scope import Scope

ENV_FLAGS = (
    "EUCALYPTUS_INDENT_WIDTH",
    "EUCALYPTUS_SHOW_TYPES",
    "EUCALYPTUS_DEBUG_PY_TRACE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start from no EUCALYPTUS_* settings and undo any the test writes."""
    for name in ENV_FLAGS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def scope() -> Scope:
    """A fresh global scope, persistent across the runs inside one test."""
    return Scope()
