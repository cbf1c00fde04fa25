"""Tests for the query override bridge."""

from __future__ import annotations

from typing import Any

import pytest

from pinned_memo.errors import NotPopulatedError
from pinned_memo.overrides import QueryOverride


def _providers(log: list[str]) -> dict[str, Any]:
    def check(key: str) -> str:
        log.append(f"check:{key}")
        return f"result:{key}"

    return {"check": check, "other": lambda key: key}


def test_installed_hook_populates_then_delegates() -> None:
    """The hook stores the extracted artifact and returns the original result."""
    log: list[str] = []
    providers = _providers(log)
    override: QueryOverride[str, dict[str, str]] = QueryOverride(
        "check", lambda key: {"facts": key.upper()}
    )
    override.install(providers)

    assert providers["check"]("item") == "result:item"
    assert log == ["check:item"]
    assert override.artifacts.retrieve("item") == {"facts": "ITEM"}


def test_fetch_runs_query_once() -> None:
    """fetch triggers the query only when the artifact is missing."""
    log: list[str] = []
    extracted: list[str] = []
    providers = _providers(log)

    def extract(key: str) -> str:
        extracted.append(key)
        return f"facts:{key}"

    override: QueryOverride[str, str] = QueryOverride("check", extract)
    override.install(providers)

    first = override.fetch(providers, "a")
    second = override.fetch(providers, "a")
    assert first == "facts:a"
    assert first is second
    assert extracted == ["a"]
    assert log == ["check:a"]


def test_fetch_without_install_reports_missing_key() -> None:
    """Without an installed hook the artifact is never populated."""
    providers = _providers([])
    override: QueryOverride[str, str] = QueryOverride("check", lambda key: key)
    with pytest.raises(NotPopulatedError, match=r"'item'.*install\(\) was called"):
        override.fetch(providers, "item")


def test_install_rejects_unknown_query() -> None:
    """Installing on a missing query name raises KeyError."""
    override: QueryOverride[str, str] = QueryOverride("missing", lambda key: key)
    with pytest.raises(KeyError, match="unknown query"):
        override.install({})


def test_install_twice_is_rejected() -> None:
    """The same override cannot wrap a provider twice."""
    providers = _providers([])
    override: QueryOverride[str, str] = QueryOverride("check", lambda key: key)
    override.install(providers)
    with pytest.raises(ValueError, match="already overridden"):
        override.install(providers)


def test_extract_receives_extra_arguments() -> None:
    """Extra positional and keyword arguments reach both extract and the original."""
    calls: list[tuple[str, int, bool]] = []

    def original(key: str, depth: int, *, strict: bool = False) -> int:
        calls.append((key, depth, strict))
        return depth

    providers: dict[str, Any] = {"walk": original}
    override: QueryOverride[str, str] = QueryOverride(
        "walk", lambda key, depth, strict=False: f"{key}:{depth}:{strict}"
    )
    override.install(providers)

    assert override.fetch(providers, "root", 2, strict=True) == "root:2:True"
    assert calls == [("root", 2, True)]


def test_hook_runs_with_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """A bad log level setting does not stop the wrapped query from running."""
    monkeypatch.setenv("PINNED_MEMO_LOG_LEVEL", "chatty")
    monkeypatch.setenv("PINNED_MEMO_TIMING", "1")
    log: list[str] = []
    providers = _providers(log)
    override: QueryOverride[str, str] = QueryOverride("check", lambda key: f"facts:{key}")
    override.install(providers)

    assert providers["check"]("item") == "result:item"
    assert log == ["check:item"]
    assert override.artifacts.retrieve("item") == "facts:item"


def test_hook_extracts_once_per_key() -> None:
    """Running the query again for a populated key skips extraction."""
    log: list[str] = []
    extracted: list[str] = []
    providers = _providers(log)

    def extract(key: str) -> str:
        extracted.append(key)
        return f"facts:{key}"

    override: QueryOverride[str, str] = QueryOverride("check", extract)
    override.install(providers)

    providers["check"]("a")
    providers["check"]("a")
    providers["check"]("b")
    assert extracted == ["a", "b"]
    assert log == ["check:a", "check:a", "check:b"]
