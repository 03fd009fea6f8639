# storefront/worker/cache_storage.py
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable

import httpx

# Headers describing the wire encoding of the original body. Snapshots
# hold the decoded body, so these would no longer be true on replay.
_WIRE_HEADERS = {"content-encoding", "content-length", "transfer-encoding"}


class CacheAddError(Exception):
    """Raised by Cache.add_all when one of the responses is not OK."""


@dataclass(frozen=True)
class ResponseSnapshot:
    """
    A fully read HTTP response that can be replayed any number of times.
    """

    url: str
    status_code: int
    headers: tuple[tuple[str, str], ...]
    content: bytes

    @classmethod
    async def capture(cls, url: str, response: httpx.Response) -> "ResponseSnapshot":
        content = await response.aread()
        await response.aclose()
        headers = tuple(
            (name, value)
            for name, value in response.headers.items()
            if name.lower() not in _WIRE_HEADERS
        )
        return cls(url=url, status_code=response.status_code, headers=headers, content=content)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def to_response(self) -> httpx.Response:
        return httpx.Response(
            self.status_code,
            headers=list(self.headers),
            content=self.content,
        )


class Cache:
    """
    One named partition of cached responses, keyed by request URL.
    """

    def __init__(self, name: str):
        self.name = name
        self._entries: dict[str, ResponseSnapshot] = {}

    async def match(self, url: str) -> ResponseSnapshot | None:
        return self._entries.get(url)

    async def put(self, url: str, snapshot: ResponseSnapshot) -> None:
        self._entries[url] = snapshot

    async def keys(self) -> list[str]:
        return list(self._entries)

    async def add_all(
        self,
        urls: Iterable[str],
        fetch: Callable[[str], Awaitable[ResponseSnapshot]],
    ) -> None:
        """
        Fetch every URL and store the responses, all or nothing.

        Any fetch error or non-OK response aborts before anything is stored.
        """
        fetched: list[ResponseSnapshot] = []
        for url in urls:
            snapshot = await fetch(url)
            if not snapshot.ok:
                raise CacheAddError(f"{url} returned {snapshot.status_code}")
            fetched.append(snapshot)

        for snapshot in fetched:
            self._entries[snapshot.url] = snapshot


class CacheStorage:
    """
    All cache partitions of one origin, in creation order.
    """

    def __init__(self) -> None:
        self._caches: dict[str, Cache] = {}

    async def open(self, name: str) -> Cache:
        cache = self._caches.get(name)
        if cache is None:
            cache = self._caches[name] = Cache(name)
        return cache

    async def delete(self, name: str) -> bool:
        return self._caches.pop(name, None) is not None

    async def keys(self) -> list[str]:
        return list(self._caches)

    async def match(self, url: str) -> ResponseSnapshot | None:
        """First match across partitions, oldest partition first."""
        for cache in list(self._caches.values()):
            snapshot = await cache.match(url)
            if snapshot is not None:
                return snapshot
        return None
