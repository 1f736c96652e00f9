from __future__ import annotations

from typing import TYPE_CHECKING

from lifecycle.shutdown_protocol import IShutdownHandler
from models.enums import StopReason
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from services.animation_session_manager import AnimationSessionManager

log = get_logger().for_category(LogCategory.SHUTDOWN)


class AnimationShutdownHandler(IShutdownHandler):
    """
    Kills the running animation runtime before anything else.

    Runs first so no runtime keeps driving the strip while the LEDs are
    cleared.

    Priority: 130
    """

    def __init__(self, sessions: "AnimationSessionManager"):
        self.sessions = sessions

    @property
    def shutdown_priority(self) -> int:
        return 130

    async def shutdown(self) -> None:
        if not self.sessions.is_running:
            log.debug("No animation running")
            return

        log.info("Stopping animation session...")
        await self.sessions.stop(reason=StopReason.SHUTDOWN)
