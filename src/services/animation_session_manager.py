"""
Animation Session Manager - runs animation scripts in isolated processes

Owns at most one AnimationSession. Each session is one runtime child
process (runtime.animation_runtime) talking the session protocol over its
stdin/stdout; its stderr is forwarded to this process's log.

While a session is active the runtime is the only writer of strip state:
the manager never touches the LED surface, it forwards brightness changes
and asks the runtime for the strip. When the session ends the surface takes
over again.

Events published on the EventBus:
- ANIMATION_STARTED    after spawn, with the surface's rendered strip
- LED_STRIP_CHANGED    for every frame the runtime shows (source ANIMATION_RUNTIME)
- BRIGHTNESS_CHANGED   on set_brightness
- ANIMATION_FINISHED   runtime reported completion (error text if the script raised)
- ANIMATION_STOPPED    stop(), pre-emption, crash or unresponsive runtime
"""

from __future__ import annotations

import asyncio
import itertools
import os
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Dict, List, Optional

from hardware.led.led_surface import LedSurface
from lifecycle.task_registry import create_tracked_task, TaskCategory
from models.brightness import Brightness, parse_brightness
from models.color import LedColor
from models.config import AnimationConfig, StripConfig
from models.enums import SessionState, StopReason, StripDriver
from models.errors import (
    AnimationRunningError,
    NoActiveSessionError,
    ProtocolError,
    RuntimeUnresponsiveError,
    SessionChannelError,
    SessionEndedError,
    SpawnFailedError,
)
from models.events import (
    AnimationFinishedEvent,
    AnimationStartedEvent,
    AnimationStoppedEvent,
    BrightnessChangedEvent,
    EventSource,
    LedStripChangedEvent,
)
from runtime.protocol import (
    FinishedMessage,
    GetLedStripMessage,
    LedStripChangedMessage,
    LedStripMessage,
    SetBrightnessMessage,
    decode_message,
    encode_message,
)
from runtime.sandbox import validate_script
from services.event_bus import EventBus
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SESSION)
script_log = get_logger().for_category(LogCategory.ANIMATION)

# Directory holding the top-level packages (runtime, models, ...)
SRC_DIR = Path(__file__).resolve().parent.parent

ENDED_STATES = (SessionState.FINISHED, SessionState.STOPPED)


@dataclass(eq=False)
class AnimationSession:
    """One runtime process and everything the manager tracks about it"""
    id: int
    process: asyncio.subprocess.Process
    script: str
    brightness: Brightness
    state: SessionState = SessionState.STARTING
    last_led_strip: Optional[List[LedColor]] = None
    pending: Dict[int, asyncio.Future] = field(default_factory=dict)
    finished: asyncio.Future = field(default_factory=lambda: asyncio.get_running_loop().create_future())
    reader: Optional[asyncio.Task] = None
    tasks: List[asyncio.Task] = field(default_factory=list)

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid

    @property
    def ended(self) -> bool:
        return self.state in ENDED_STATES


class AnimationSessionManager:
    """
    Single-slot owner of the animation runtime process

    Example:
        manager = AnimationSessionManager(surface, event_bus)

        await manager.start("leds.fill_leds((255, 0, 0))\\nawait leds.show()")
        strip = await manager.query_led_strip()
        state = await manager.wait_for_finished()   # SessionState.FINISHED
    """

    def __init__(
        self,
        surface: LedSurface,
        event_bus: EventBus,
        animation_config: Optional[AnimationConfig] = None,
        strip_config: Optional[StripConfig] = None,
    ):
        self._surface = surface
        self._event_bus = event_bus
        self._config = animation_config or AnimationConfig()
        self._strip_config = strip_config or StripConfig(
            led_count=surface.led_count,
            driver=StripDriver.VIRTUAL,
        )

        self._session: Optional[AnimationSession] = None
        self._lock = asyncio.Lock()
        self._session_ids = itertools.count(1)
        self._request_ids = itertools.count(1)

    # === Properties ===

    @property
    def is_running(self) -> bool:
        return self._session is not None

    @property
    def state(self) -> Optional[SessionState]:
        return self._session.state if self._session else None

    @property
    def session(self) -> Optional[AnimationSession]:
        return self._session

    # === Lifecycle ===

    async def start(self, script: str, initial_brightness: Optional[Brightness] = None) -> None:
        """
        Start a new session, terminating the current one first

        Raises:
            ScriptValidationError: empty script, syntax error or sandbox violation
            InvalidBrightnessError: invalid initial_brightness
            SpawnFailedError: runtime process could not be created
        """
        validate_script(script)
        brightness = (
            parse_brightness(initial_brightness)
            if initial_brightness is not None
            else self._surface.get_brightness()
        )

        async with self._lock:
            previous = self._session
            if previous is not None:
                log.info("Pre-empting running animation", session=previous.id, pid=previous.pid)
                await self._end_session(previous, SessionState.STOPPED, reason=StopReason.PREEMPTED)

            session_id = next(self._session_ids)
            try:
                process = await asyncio.create_subprocess_exec(
                    *self._runtime_command(script, brightness),
                    stdin=asyncio.subprocess.PIPE,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    env=self._runtime_env(),
                    limit=self._config.stream_limit,
                )
            except (OSError, ValueError) as ex:
                log.error("Failed to spawn animation runtime", error=str(ex), error_type=type(ex).__name__)
                raise SpawnFailedError(f"Failed to start the animation runtime: {ex}") from ex

            session = AnimationSession(
                id=session_id,
                process=process,
                script=script,
                brightness=brightness,
            )
            self._session = session

            session.reader = create_tracked_task(
                self._read_messages(session),
                category=TaskCategory.SESSION,
                description=f"Animation session {session_id} protocol reader",
            )
            session.tasks = [
                session.reader,
                create_tracked_task(
                    self._forward_stderr(session),
                    category=TaskCategory.SESSION,
                    description=f"Animation session {session_id} stderr forwarder",
                ),
            ]

            # Readiness is not awaited; failures arrive through the protocol
            session.state = SessionState.RUNNING
            log.info("Animation session started", session=session_id, pid=process.pid, brightness=brightness)

            await self._event_bus.publish(AnimationStartedEvent(
                led_strip=self._surface.get_led_strip(),
                pid=process.pid,
            ))

    async def stop(self, reason: StopReason = StopReason.REQUESTED) -> None:
        """Kill the running session; no-op without one"""
        async with self._lock:
            session = self._session
            if session is None:
                log.debug("stop(): no animation running")
                return
            await self._end_session(session, SessionState.STOPPED, reason=reason)

    @asynccontextmanager
    async def idle_surface(self) -> AsyncIterator[LedSurface]:
        """
        Hold off start()/stop() while the control plane writes the surface

        Raises:
            AnimationRunningError: a session owns the strip
        """
        async with self._lock:
            if self._session is not None:
                raise AnimationRunningError()
            yield self._surface

    async def wait_for_finished(self) -> SessionState:
        """
        Wait until the current session ends

        Cancelling one waiter leaves the session and other waiters untouched.

        Raises:
            NoActiveSessionError: nothing is running
        """
        session = self._session
        if session is None:
            raise NoActiveSessionError()
        return await asyncio.shield(session.finished)

    # === Brightness ===

    async def set_brightness(self, value: Brightness) -> None:
        """
        Apply brightness to the surface, or route it to the running session

        Raises:
            InvalidBrightnessError: value is not 0-100 or "auto"
            SessionChannelError: the runtime could not be written to
        """
        brightness = parse_brightness(value)
        session = self._session

        if session is None:
            self._surface.set_brightness(brightness)
            await self._surface.show()
        else:
            session.brightness = brightness
            self._send(session, SetBrightnessMessage(brightness=brightness))

        await self._event_bus.publish(BrightnessChangedEvent(brightness))

    def get_brightness(self) -> Brightness:
        session = self._session
        if session is not None:
            return session.brightness
        return self._surface.get_brightness()

    # === Strip queries ===

    async def query_led_strip(self) -> List[LedColor]:
        """
        Current rendered strip

        Without a session this reads the surface. With one, the runtime is
        asked and the caller waits for its reply.

        Raises:
            RuntimeUnresponsiveError: no reply within query_timeout (session torn down)
            SessionEndedError: session ended while waiting
            SessionChannelError: the runtime could not be written to
        """
        session = self._session
        if session is None:
            return self._surface.get_led_strip()

        request_id = next(self._request_ids)
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        # Registered before sending so a fast reply always finds its future
        session.pending[request_id] = future

        try:
            self._send(session, GetLedStripMessage(request_id=request_id))
            return await asyncio.wait_for(future, timeout=self._config.query_timeout)
        except asyncio.TimeoutError:
            log.error(
                "Animation runtime did not answer, stopping session",
                session=session.id,
                request_id=request_id,
                timeout=self._config.query_timeout,
            )
            async with self._lock:
                await self._end_session(session, SessionState.STOPPED, reason=StopReason.UNRESPONSIVE)
            raise RuntimeUnresponsiveError(
                f"Animation runtime did not answer within {self._config.query_timeout}s"
            ) from None
        finally:
            session.pending.pop(request_id, None)

    # === Runtime process ===

    def _runtime_command(self, script: str, brightness: Brightness) -> List[str]:
        strip = self._strip_config
        command = [
            sys.executable, "-m", "runtime.animation_runtime",
            "--led-count", str(self._surface.led_count),
            "--brightness", str(brightness),
            "--auto-max-load", str(strip.auto_brightness_max_load),
            "--driver", strip.driver.value,
            "--color-order", strip.color_order,
            "--log-level", self._config.runtime_log_level.name,
        ]
        if strip.gpio_pin is not None:
            command += ["--gpio-pin", str(strip.gpio_pin)]
        # "--" so scripts starting with "-" are not read as options
        return command + ["--", script]

    @staticmethod
    def _runtime_env() -> Dict[str, str]:
        env = dict(os.environ)
        paths = [str(SRC_DIR)] + [p for p in env.get("PYTHONPATH", "").split(os.pathsep) if p]
        env["PYTHONPATH"] = os.pathsep.join(paths)
        env["PYTHONUNBUFFERED"] = "1"
        return env

    def _send(self, session: AnimationSession, message) -> None:
        stdin = session.process.stdin
        if stdin is None or stdin.is_closing():
            raise SessionChannelError("Animation runtime input is closed")
        try:
            stdin.write(encode_message(message))
        except (BrokenPipeError, ConnectionResetError, RuntimeError) as ex:
            # Process death itself is picked up by the reader
            raise SessionChannelError(f"Failed to write to the animation runtime: {ex}") from ex

    async def _read_messages(self, session: AnimationSession) -> None:
        """Protocol reader; ends the session on finished or EOF"""
        stdout = session.process.stdout
        finished: Optional[FinishedMessage] = None

        while True:
            try:
                line = await stdout.readline()
            except ValueError as ex:
                # Line longer than the stream limit; the rest of it is dropped
                log.warn("Oversized message from animation runtime", session=session.id, error=str(ex))
                continue

            if not line:
                break

            try:
                message = decode_message(line)
            except ProtocolError as ex:
                log.warn("Skipping undecodable runtime message", session=session.id, error=str(ex))
                continue

            if session is not self._session or session.ended:
                log.debug("Dropping message from old session", session=session.id, action=message.action)
                continue

            if isinstance(message, LedStripChangedMessage):
                session.last_led_strip = message.led_strip
                await self._event_bus.publish(LedStripChangedEvent(
                    led_strip=message.led_strip,
                    source=EventSource.ANIMATION_RUNTIME,
                ))

            elif isinstance(message, LedStripMessage):
                future = session.pending.get(message.request_id)
                if future is not None and not future.done():
                    future.set_result(message.led_strip)
                else:
                    log.debug("Reply for unknown query", session=session.id, request_id=message.request_id)

            elif isinstance(message, FinishedMessage):
                finished = message
                break

            else:
                log.warn("Unexpected message from runtime", session=session.id, action=message.action)

        exit_code = await session.process.wait()

        if session.ended:
            return

        if finished is not None:
            await self._finish_session(session, finished, exit_code)
        else:
            log.warn("Animation runtime exited without finishing", session=session.id, exit_code=exit_code)
            await self._end_session(
                session, SessionState.STOPPED, reason=StopReason.EXITED, exit_code=exit_code
            )

    async def _forward_stderr(self, session: AnimationSession) -> None:
        stderr = session.process.stderr
        while True:
            try:
                line = await stderr.readline()
            except ValueError:
                continue
            if not line:
                return
            text = line.decode("utf-8", errors="replace").rstrip()
            if text:
                script_log.info(f"[pid {session.pid}] {text}")

    # === Session teardown ===

    async def _finish_session(self, session: AnimationSession, message: FinishedMessage, exit_code: int) -> None:
        """Runtime reported completion: adopt its final state, then tear down"""
        if session.ended:
            return

        self._surface.restore(message.led_strip, message.brightness)
        self._release(session, SessionState.FINISHED)

        if message.error:
            log.warn("Animation script failed", session=session.id, error=message.error, exit_code=exit_code)
        else:
            log.info("Animation finished", session=session.id, exit_code=exit_code)

        await self._event_bus.publish(AnimationFinishedEvent(
            led_strip=self._surface.get_led_strip(),
            error=message.error,
        ))

    async def _end_session(
        self,
        session: AnimationSession,
        state: SessionState,
        reason: StopReason,
        exit_code: Optional[int] = None,
    ) -> None:
        """
        Kill the runtime (if alive), clear the session, publish ANIMATION_STOPPED

        Idempotent per session: only the first call for a session acts.
        """
        if session.ended:
            return

        # Adopt the brightness the user last asked for; the pixel buffer the
        # runtime held is gone with the process
        self._surface.restore(None, session.brightness)
        self._release(session, state)

        if session.process.returncode is None:
            try:
                session.process.kill()
            except ProcessLookupError:
                pass
            exit_code = await session.process.wait()

        await self._stop_reader(session)

        log.info(
            "Animation session stopped",
            session=session.id,
            reason=reason.value,
            exit_code=exit_code,
        )

        await self._event_bus.publish(AnimationStoppedEvent(
            led_strip=session.last_led_strip or self._surface.get_led_strip(),
            reason=reason,
            exit_code=exit_code,
        ))

    @staticmethod
    async def _stop_reader(session: AnimationSession) -> None:
        """
        Cancel the session's protocol reader and wait for it

        A relay publish from this session may still be suspended in a
        subscriber; it must not deliver anything once the next session starts.
        Skipped when teardown runs on the reader itself (finished, EOF).
        """
        reader = session.reader
        if reader is None or reader is asyncio.current_task() or reader.done():
            return
        reader.cancel()
        await asyncio.wait({reader})

    def _release(self, session: AnimationSession, state: SessionState) -> None:
        """Synchronous part of teardown: state, slot, pending queries, finished waiters"""
        session.state = state
        if self._session is session:
            self._session = None

        for request_id, future in list(session.pending.items()):
            if not future.done():
                future.set_exception(SessionEndedError(
                    f"Animation session ended before answering query {request_id}"
                ))
        session.pending.clear()

        if not session.finished.done():
            session.finished.set_result(state)

        if session.process.stdin is not None and not session.process.stdin.is_closing():
            session.process.stdin.close()
