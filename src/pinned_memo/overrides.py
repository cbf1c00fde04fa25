"""Query override bridge.

An external system resolves named queries through a mutable providers mapping.
Installing a :class:`QueryOverride` wraps one of those providers: every time the
query runs, an expensive side artifact is extracted for the key and stashed in a
thread-confined cache before the original provider runs. A consumer later calls
:meth:`QueryOverride.fetch` to get that artifact back.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, MutableMapping
from typing import Any, Generic, TypeVar

from pinned_memo.log import get_logger
from pinned_memo.scoped import ThreadConfinedCache
from pinned_memo.timing import block_timer

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Provider = Callable[..., Any]

logger = get_logger(__name__)


class _OverrideHook:
    """Provider replacement that populates artifacts, then delegates."""

    def __init__(self, override: QueryOverride[Any, Any], original: Provider) -> None:
        self.override = override
        self.original = original

    def __call__(self, key: Any, *args: Any, **kwargs: Any) -> Any:
        override = self.override
        if not override.artifacts.is_populated(key):
            with block_timer(f"{override.name} for {key!r}"):
                artifact = override.extract(key, *args, **kwargs)
            override.artifacts.populate(key, lambda _: artifact)
        return self.original(key, *args, **kwargs)


class QueryOverride(Generic[K, V]):
    """Capture a per-key artifact whenever the named query runs."""

    def __init__(self, name: str, extract: Callable[..., V]) -> None:
        self.name = name
        self.extract = extract
        self.artifacts: ThreadConfinedCache[K, V] = ThreadConfinedCache(
            f"override:{name}",
            hint=f"Are you sure QueryOverride({name!r}).install() was called on the providers?",
        )

    def install(self, providers: MutableMapping[str, Provider]) -> None:
        """Replace ``providers[name]`` with a hook that populates artifacts."""
        if self.name not in providers:
            raise KeyError(f"unknown query: {self.name!r}")
        current = providers[self.name]
        if isinstance(current, _OverrideHook) and current.override is self:
            raise ValueError(f"query {self.name!r} is already overridden")
        providers[self.name] = _OverrideHook(self, current)
        logger.debug("query_override_installed", query=self.name)

    def fetch(self, providers: MutableMapping[str, Provider], key: K, *args: Any, **kwargs: Any) -> V:
        """Run the query for ``key`` if needed and return the artifact it stashed."""
        if not self.artifacts.is_populated(key):
            providers[self.name](key, *args, **kwargs)
        return self.artifacts.retrieve(key)
