"""
Shutdown coordinator that orchestrates graceful shutdown of all components.

Manages signal handlers, shutdown sequencing, and error handling across
multiple shutdown handlers in priority order.
"""

import asyncio
import signal
from typing import List, Optional, Dict, Set

from lifecycle.shutdown_protocol import IShutdownHandler
from lifecycle.task_registry import TaskRegistry, TaskCategory
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)

# A failure in one of these ends the application
CRITICAL_CATEGORIES: Set[TaskCategory] = {TaskCategory.API}


class ShutdownCoordinator:
    """
    Coordinates graceful shutdown of multiple components.

    Example:
        coordinator = ShutdownCoordinator()
        coordinator.register(AnimationShutdownHandler(sessions))   # 130
        coordinator.register(APIServerShutdownHandler(servers))    # 90
        coordinator.register(LEDShutdownHandler(surface))          # 50

        coordinator.setup_signal_handlers(loop)
        await coordinator.wait_for_shutdown()
        await coordinator.shutdown_all()
    """

    def __init__(self, timeout_per_handler: float = 5.0, total_timeout: float = 15.0):
        self._handlers: List[IShutdownHandler] = []
        self._shutdown_event = asyncio.Event()
        self._timeout_per_handler = timeout_per_handler
        self._total_timeout = total_timeout
        self._shutdown_trigger: Dict[str, Optional[str]] = {"reason": None}

    @property
    def reason(self) -> Optional[str]:
        return self._shutdown_trigger["reason"]

    def register(self, handler: IShutdownHandler) -> None:
        """
        Register a shutdown handler.

        Handler must have a shutdown_priority property (int) and an async
        shutdown() method.
        """
        if not hasattr(handler, "shutdown_priority"):
            raise ValueError(f"Handler {handler} missing shutdown_priority property")
        if not hasattr(handler, "shutdown"):
            raise ValueError(f"Handler {handler} missing shutdown() method")

        self._handlers.append(handler)
        log.debug(f"Registered shutdown handler: {handler.__class__.__name__}")

    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """Install SIGINT (Ctrl+C) and SIGTERM handlers that trigger shutdown."""

        def signal_handler(sig: signal.Signals) -> None:
            self.request_shutdown(sig.name)

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))

        log.info("Signal handlers installed (SIGINT, SIGTERM)")

    def request_shutdown(self, reason: str) -> None:
        if self._shutdown_event.is_set():
            return
        self._shutdown_trigger["reason"] = reason
        log.info(f"Shutdown requested: {reason}")
        self._shutdown_event.set()

    def _critical_failure(self) -> Optional[str]:
        for record in TaskRegistry.instance().failed():
            if record.info.category in CRITICAL_CATEGORIES:
                return record.info.description
        return None

    async def wait_for_shutdown(self) -> None:
        """
        Wait for a shutdown signal or the failure of a critical task.

        Critical tasks that end cleanly (an API server stopped on purpose)
        do not trigger shutdown.
        """
        while not self._shutdown_event.is_set():
            failed = self._critical_failure()
            if failed:
                log.error(f"Critical task failed: {failed}")
                self._shutdown_trigger["reason"] = f"Task failure: {failed}"
                return

            critical_tasks = [
                r.task for r in TaskRegistry.instance().active()
                if r.info.category in CRITICAL_CATEGORIES
            ]

            shutdown_waiter = asyncio.create_task(self._shutdown_event.wait())
            try:
                await asyncio.wait(
                    {shutdown_waiter, *critical_tasks},
                    timeout=None if critical_tasks else 0.5,
                    return_when=asyncio.FIRST_COMPLETED,
                )
            finally:
                # Only the waiter; critical tasks stay alive across iterations
                if not shutdown_waiter.done():
                    shutdown_waiter.cancel()

    async def shutdown_all(self) -> None:
        """
        Execute graceful shutdown of all handlers in priority order.

        Highest priority first. Each handler has its own timeout and the
        whole sequence has a global one; a failing handler does not stop
        the others.
        """
        log.info("Initiating graceful shutdown sequence", reason=self.reason or "UNKNOWN")

        sorted_handlers = sorted(self._handlers, key=lambda h: h.shutdown_priority, reverse=True)
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        for handler in sorted_handlers:
            handler_name = handler.__class__.__name__

            elapsed = loop.time() - start_time
            if elapsed > self._total_timeout:
                log.error(f"Total shutdown timeout exceeded ({elapsed:.1f}s > {self._total_timeout}s)")
                break

            try:
                log.debug(f"Shutting down {handler_name} (priority={handler.shutdown_priority})...")
                await asyncio.wait_for(handler.shutdown(), timeout=self._timeout_per_handler)
                log.debug(f"{handler_name} shutdown complete")

            except asyncio.TimeoutError:
                log.error(f"{handler_name} shutdown timeout ({self._timeout_per_handler}s)")

            except Exception as e:
                log.error(f"Error shutting down {handler_name}", error=str(e), error_type=type(e).__name__)

        log.info("Shutdown sequence complete")

    def get_handler(self, handler_type: type):
        """Registered handler of the given type, or None"""
        for handler in self._handlers:
            if isinstance(handler, handler_type):
                return handler
        return None
