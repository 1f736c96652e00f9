from __future__ import annotations
import asyncio
import uvicorn
from typing import Any, Optional
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)


class APIServerWrapper:
    """
    One uvicorn server run as a tracked task under the shutdown coordinator.

    The process runs two: the control plane (API + Socket.IO) and, with auth
    on, the registration confirmation app on its own port.

    - start() serves until stop() is called, then returns normally; a bind
      failure is raised from start() so the tracked task fails and the
      coordinator shuts the process down
    - stop() asks uvicorn to exit, forces it after a timeout and releases
      the port; calling it on a stopped wrapper is a no-op
    - uvicorn's own signal handlers are disabled, SIGINT/SIGTERM belong to
      the coordinator
    """

    def __init__(self, app: Any, host: str = "0.0.0.0", port: int = 45451, name: str = "API server"):
        self.app = app
        self.host = host
        self.port = port
        self.name = name
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._serve_task is not None and not self._serve_task.done()

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._serve_task

    @property
    def server(self) -> Optional[uvicorn.Server]:
        return self._server

    def _build_server(self) -> uvicorn.Server:
        server = uvicorn.Server(uvicorn.Config(
            app=self.app,
            host=self.host,
            port=self.port,
            loop="asyncio",
            log_level="warning",
            access_log=False,
            server_header=False,
        ))
        server.install_signal_handlers = lambda: None  # type: ignore
        return server

    async def _wait_until_started(self, timeout: float) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while loop.time() < deadline and not self._serve_task.done():
            if self._server.started:
                log.info(f"{self.name} listening on http://{self.host}:{self.port}")
                return
            await asyncio.sleep(0.05)

        if self._serve_task.done() and not self._serve_task.cancelled():
            error = self._serve_task.exception()
            if error is not None:
                raise error

    async def start(self, *, wait_started_timeout: float = 5.0) -> None:
        if self.is_running:
            raise RuntimeError(f"{self.name} already started")

        self._stop_event.clear()
        self._server = self._build_server()
        self._serve_task = asyncio.create_task(self._server.serve(), name=f"uvicorn:{self.port}")

        try:
            await self._wait_until_started(wait_started_timeout)
            await self._stop_event.wait()
        except asyncio.CancelledError:
            log.debug(f"{self.name} task cancelled, stopping server")
            await self.stop()
            raise
        except BaseException:
            self._server = None
            self._serve_task = None
            raise

    async def stop(self, *, shutdown_timeout: float = 2.0) -> None:
        self._stop_event.set()
        server, serve_task = self._server, self._serve_task
        if server is None:
            return

        log.info(f"Stopping {self.name}...")
        server.should_exit = True

        if serve_task is not None and not serve_task.done():
            try:
                await asyncio.wait_for(asyncio.shield(serve_task), timeout=shutdown_timeout)
            except asyncio.TimeoutError:
                log.warn(f"{self.name} did not stop in {shutdown_timeout}s; forcing exit")
                server.force_exit = True
                serve_task.cancel()
                await asyncio.gather(serve_task, return_exceptions=True)

        self._server = None
        self._serve_task = None
        log.info(f"{self.name} stopped", port=self.port)
