# storefront/worker/registration.py
import logging

import httpx

from storefront.worker.offline_worker import OfflineCacheWorker, WorkerState

logger = logging.getLogger(__name__)


class ServiceWorkerRegistration:
    """
    Hosts offline cache workers for one origin.

    - register(): installs a worker; it becomes active right away when it
      asked to skip waiting or when nothing is active yet, otherwise it
      waits until release_clients() is called.
    - controller: the active worker once it has claimed clients.
    """

    def __init__(self) -> None:
        self.active: OfflineCacheWorker | None = None
        self.waiting: OfflineCacheWorker | None = None

    @property
    def controller(self) -> OfflineCacheWorker | None:
        if self.active is not None and self.active.clients_claimed:
            return self.active
        return None

    async def register(self, worker: OfflineCacheWorker) -> OfflineCacheWorker | None:
        if not await worker.install():
            logger.warning(f"Worker {worker.version} failed to install; keeping current")
            return self.active

        if self.active is None or worker.skip_waiting_requested:
            await self._promote(worker)
        else:
            if self.waiting is not None:
                self.waiting.retire()
            self.waiting = worker
            logger.info(f"Worker {worker.version} installed and waiting")
        return self.active

    async def release_clients(self) -> None:
        """Old pages are gone: a waiting worker may take over now."""
        if self.waiting is not None:
            await self._promote(self.waiting)

    async def _promote(self, worker: OfflineCacheWorker) -> None:
        previous = self.active
        await worker.activate()
        self.active = worker
        if self.waiting is worker:
            self.waiting = None
        if previous is not None and previous is not worker:
            previous.retire()


class OfflineCacheTransport(httpx.AsyncBaseTransport):
    """
    httpx transport that routes every request through the controlling
    offline cache worker, or straight to the network when none controls.

        registration = ServiceWorkerRegistration()
        await registration.register(OfflineCacheWorker(network))
        client = httpx.AsyncClient(
            transport=OfflineCacheTransport(registration, network),
        )
    """

    def __init__(
        self,
        registration: ServiceWorkerRegistration,
        network: httpx.AsyncBaseTransport,
    ):
        self.registration = registration
        self.network = network

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        worker = self.registration.controller
        if worker is None or worker.state is not WorkerState.ACTIVATED:
            return await self.network.handle_async_request(request)
        return await worker.handle_fetch(request)

    async def aclose(self) -> None:
        await self.network.aclose()
