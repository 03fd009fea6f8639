# storefront/worker/offline_worker.py
"""
Offline cache worker.

Serves intercepted GET requests with a per-class caching policy:

  - API calls (/api/... or the backend host): network first, cache on 200,
    fall back to the cache when the network is unreachable.
  - Static assets (image, style, script, font): cache first, network on miss.
  - Documents: network first, cache fallback, stored with the static assets.
  - Anything else: network, cache fallback, never stored.

Lifecycle:

    parsed -> installing -> installed -> activating -> activated
                  \\-> redundant (install failed or replaced)

`install()` pre-caches the app shell, `activate()` drops partitions from
older versions. Cache writes are best-effort and never fail a response.
"""
import logging
from enum import Enum
from pathlib import PurePosixPath
from typing import Iterable
from urllib.parse import urljoin

import httpx

from storefront.core.config import Settings
from storefront.worker.cache_storage import CacheAddError, CacheStorage, ResponseSnapshot

logger = logging.getLogger(__name__)

SHELL_MANIFEST: tuple[str, ...] = (
    "/",
    "/index.html",
    "/favicon.svg",
    "/apple-touch-icon.png",
    "/robots.txt",
)

STATIC_DESTINATIONS = {"image", "style", "script", "font"}

EXTENSION_DESTINATIONS: dict[str, str] = {
    ".png": "image",
    ".jpg": "image",
    ".jpeg": "image",
    ".gif": "image",
    ".webp": "image",
    ".svg": "image",
    ".ico": "image",
    ".avif": "image",
    ".css": "style",
    ".js": "script",
    ".mjs": "script",
    ".woff": "font",
    ".woff2": "font",
    ".ttf": "font",
    ".otf": "font",
    ".html": "document",
}


class WorkerState(str, Enum):
    PARSED = "parsed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class RequestClass(str, Enum):
    API = "api"
    STATIC_ASSET = "static_asset"
    DOCUMENT = "document"
    OTHER = "other"


class InvalidWorkerState(RuntimeError):
    pass


def request_destination(request: httpx.Request) -> str:
    """
    What the request is for, the way a browser's Sec-Fetch-Dest reports it.

    Falls back to the path extension, then to the Accept header.
    """
    dest = request.headers.get("sec-fetch-dest")
    if dest:
        return dest.strip().lower()

    suffix = PurePosixPath(request.url.path).suffix.lower()
    if suffix in EXTENSION_DESTINATIONS:
        return EXTENSION_DESTINATIONS[suffix]

    if "text/html" in request.headers.get("accept", ""):
        return "document"
    return ""


class OfflineCacheWorker:
    def __init__(
        self,
        network: httpx.AsyncBaseTransport,
        caches: CacheStorage | None = None,
        *,
        version: str = "v1",
        prefix: str = "sdms",
        origin: str = "http://localhost:8080",
        backend_host: str = "supabase.co",
        manifest: Iterable[str] = SHELL_MANIFEST,
        skip_waiting: bool = True,
    ):
        self.network = network
        self.caches = caches or CacheStorage()
        self.version = version
        self.static_cache_name = f"{prefix}-static-{version}"
        self.dynamic_cache_name = f"{prefix}-cache-{version}"
        self.origin = origin
        self.backend_host = backend_host
        self.manifest = tuple(manifest)
        self.skip_waiting = skip_waiting

        self.state = WorkerState.PARSED
        self.skip_waiting_requested = False
        self.clients_claimed = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        network: httpx.AsyncBaseTransport,
        caches: CacheStorage | None = None,
    ) -> "OfflineCacheWorker":
        return cls(
            network,
            caches,
            version=settings.CACHE_VERSION,
            prefix=settings.CACHE_PREFIX,
            origin=settings.APP_ORIGIN,
            backend_host=settings.BACKEND_HOST,
        )

    @property
    def cache_names(self) -> set[str]:
        return {self.static_cache_name, self.dynamic_cache_name}

    # ---- lifecycle ----

    async def install(self) -> bool:
        """
        Pre-cache the app shell into the static partition.

        Returns False (and the worker becomes redundant) if any manifest
        entry cannot be fetched.
        """
        if self.state is not WorkerState.PARSED:
            raise InvalidWorkerState(f"cannot install from {self.state.value}")

        self.state = WorkerState.INSTALLING
        logger.info(f"Offline cache worker {self.version} installing...")
        try:
            cache = await self.caches.open(self.static_cache_name)
            urls = [urljoin(self.origin, path) for path in self.manifest]
            await cache.add_all(urls, self._fetch_url)
        except (httpx.HTTPError, CacheAddError) as e:
            logger.error(f"Offline cache worker installation failed: {e}")
            self.state = WorkerState.REDUNDANT
            return False

        self.state = WorkerState.INSTALLED
        self.skip_waiting_requested = self.skip_waiting
        logger.info(f"Offline cache worker {self.version} installed")
        return True

    async def activate(self) -> None:
        """
        Delete partitions left by other versions, then take control of clients.
        """
        if self.state is not WorkerState.INSTALLED:
            raise InvalidWorkerState(f"cannot activate from {self.state.value}")

        self.state = WorkerState.ACTIVATING
        logger.info(f"Offline cache worker {self.version} activating...")
        for name in await self.caches.keys():
            if name not in self.cache_names:
                logger.info(f"Deleting old cache: {name}")
                await self.caches.delete(name)

        self.state = WorkerState.ACTIVATED
        self.clients_claimed = True
        logger.info(f"Offline cache worker {self.version} activated")

    def retire(self) -> None:
        self.state = WorkerState.REDUNDANT
        self.clients_claimed = False

    # ---- fetch handling ----

    def classify(self, request: httpx.Request) -> RequestClass:
        if request.url.path.startswith("/api/") or self.backend_host in request.url.host:
            return RequestClass.API

        destination = request_destination(request)
        if destination in STATIC_DESTINATIONS:
            return RequestClass.STATIC_ASSET
        if destination == "document":
            return RequestClass.DOCUMENT
        return RequestClass.OTHER

    async def handle_fetch(self, request: httpx.Request) -> httpx.Response:
        if request.method != "GET":
            return await self.network.handle_async_request(request)

        request_class = self.classify(request)
        if request_class is RequestClass.API:
            return await self._network_first(request, self.dynamic_cache_name)
        if request_class is RequestClass.STATIC_ASSET:
            return await self._cache_first(request, self.static_cache_name)
        if request_class is RequestClass.DOCUMENT:
            return await self._network_first(request, self.static_cache_name)
        return await self._network_first(request, None)

    async def _network_first(
        self,
        request: httpx.Request,
        cache_name: str | None,
    ) -> httpx.Response:
        url = str(request.url)
        try:
            snapshot = await self._fetch(request)
        except httpx.TransportError as e:
            cached = await self.caches.match(url)
            if cached is None:
                logger.warning(f"Network failed and nothing cached for {url}: {e}")
                raise
            logger.info(f"Serving {url} from cache (network failed: {e})")
            return cached.to_response()

        if cache_name is not None and snapshot.status_code == 200:
            await self._cache_put(cache_name, snapshot)
        return snapshot.to_response()

    async def _cache_first(self, request: httpx.Request, cache_name: str) -> httpx.Response:
        cached = await self.caches.match(str(request.url))
        if cached is not None:
            return cached.to_response()

        snapshot = await self._fetch(request)
        if snapshot.status_code == 200:
            await self._cache_put(cache_name, snapshot)
        return snapshot.to_response()

    async def _cache_put(self, cache_name: str, snapshot: ResponseSnapshot) -> None:
        try:
            cache = await self.caches.open(cache_name)
            await cache.put(snapshot.url, snapshot)
        except Exception as e:
            logger.warning(f"Could not cache {snapshot.url} in {cache_name}: {e}")

    async def _fetch(self, request: httpx.Request) -> ResponseSnapshot:
        response = await self.network.handle_async_request(request)
        return await ResponseSnapshot.capture(str(request.url), response)

    async def _fetch_url(self, url: str) -> ResponseSnapshot:
        return await self._fetch(httpx.Request("GET", url))
