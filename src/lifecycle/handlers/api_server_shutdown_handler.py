from __future__ import annotations
from typing import TYPE_CHECKING, List

from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from lifecycle.api_server_wrapper import APIServerWrapper

log = get_logger().for_category(LogCategory.SHUTDOWN)


class APIServerShutdownHandler(IShutdownHandler):
    """
    Stops the HTTP servers (control plane and registration confirmation).

    Priority: 90 (after the animation session, before the LEDs are cleared)
    """

    def __init__(self, servers: List["APIServerWrapper"]):
        self.servers = servers

    @property
    def shutdown_priority(self) -> int:
        return 90

    async def shutdown(self) -> None:
        for server in self.servers:
            if not server.is_running:
                log.debug(f"{server.name} not running")
                continue
            log.info(f"Stopping {server.name}...")
            await server.stop()
