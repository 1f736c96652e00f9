"""
Animation endpoints - start, stop and wait for animation sessions
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_service_container
from api.middleware.auth import require_api_key
from api.schemas.animation import (
    AnimationFinishedResponse,
    AnimationStatusResponse,
    StartAnimationRequest,
)
from services.animation_session_manager import AnimationSessionManager
from services.service_container import ServiceContainer
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)

router = APIRouter(prefix="/led-strip/animation", tags=["Animation"], dependencies=[Depends(require_api_key)])


def _status(sessions: AnimationSessionManager) -> AnimationStatusResponse:
    session = sessions.session
    if session is None:
        return AnimationStatusResponse(running=False)
    return AnimationStatusResponse(running=True, state=session.state.name.lower(), pid=session.pid)


@router.get(
    "",
    response_model=AnimationStatusResponse,
    summary="Animation status",
    description="Whether an animation session currently owns the strip"
)
async def get_animation_status(
    services: ServiceContainer = Depends(get_service_container)
) -> AnimationStatusResponse:
    return _status(services.sessions)


@router.post(
    "/start",
    response_model=AnimationStatusResponse,
    summary="Start animation",
    description="Run a script in a new runtime process, stopping the running animation first"
)
async def start_animation(
    request: StartAnimationRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> AnimationStatusResponse:
    """
    The script sees `leds`, `led_count`, `print`, `sleep` and the `math`,
    `random` and `colorsys` modules; top-level `await` is allowed.

    **Errors:**
    - 400: empty script, syntax error or forbidden construct; invalid brightness
    - 500: runtime process could not be started
    """
    await services.sessions.start(request.animation_script, request.brightness)
    return _status(services.sessions)


@router.delete(
    "/stop",
    response_model=AnimationStatusResponse,
    summary="Stop animation",
    description="Kill the running animation; succeeds when nothing runs"
)
async def stop_animation(
    services: ServiceContainer = Depends(get_service_container)
) -> AnimationStatusResponse:
    await services.sessions.stop()
    return _status(services.sessions)


@router.get(
    "/finished",
    response_model=AnimationFinishedResponse,
    summary="Wait for animation to finish",
    description="Blocks until the running session finishes or is stopped"
)
async def wait_for_animation(
    services: ServiceContainer = Depends(get_service_container)
) -> AnimationFinishedResponse:
    """
    **Errors:**
    - 409: no animation running
    """
    state = await services.sessions.wait_for_finished()
    return AnimationFinishedResponse(state=state.name.lower())
