"""
Animation runtime - child process that runs one animation script

Launched by the AnimationSessionManager:

    python -m runtime.animation_runtime --led-count 141 --brightness 80 <script>

The original stdout file descriptor carries the session protocol; everything
else (script print output, this process's log) goes to stderr, which the
control process forwards to its own log.

Exit code 0 when the script completed, 1 when it raised or the control
process went away.
"""

import argparse
import asyncio
import os
import sys
import traceback
from typing import BinaryIO, List, Optional

from hardware.led.led_surface import LedSurface
from hardware.led.strip_factory import create_strip
from models.brightness import parse_brightness
from models.color import LedColor
from models.enums import LogLevel, StripDriver
from models.errors import LedStripError
from runtime.protocol import (
    FinishedMessage,
    GetLedStripMessage,
    LedStripChangedMessage,
    LedStripMessage,
    SetBrightnessMessage,
    decode_message,
    encode_message,
)
from runtime.sandbox import run_script
from utils.logger import configure_logger, get_logger, LogCategory

log = get_logger().for_category(LogCategory.ANIMATION)


class ProtocolChannel:
    """Outbound half of the session protocol (child -> parent)"""

    def __init__(self, stream: BinaryIO):
        self._stream = stream

    def send(self, message) -> None:
        self._stream.write(encode_message(message))
        self._stream.flush()

    def close(self) -> None:
        self._stream.close()


def take_protocol_stream() -> BinaryIO:
    """
    Detach the protocol stream from stdout

    Duplicates fd 1 for the protocol, then points fd 1 and sys.stdout at
    stderr so stray writes cannot corrupt the message stream.
    """
    sys.stdout.flush()
    stdout_fd = sys.stdout.fileno()
    protocol_fd = os.dup(stdout_fd)
    os.dup2(sys.stderr.fileno(), stdout_fd)
    sys.stdout = sys.stderr
    return os.fdopen(protocol_fd, "wb", buffering=0)


async def open_stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    return reader


async def handle_inbound(reader: asyncio.StreamReader, surface: LedSurface, channel: ProtocolChannel) -> None:
    """
    Apply parent messages in receipt order until stdin closes

    Each get-led-strip gets exactly one led-strip reply.
    """
    while True:
        line = await reader.readline()
        if not line:
            log.debug("Control process closed stdin")
            return

        try:
            message = decode_message(line)
        except LedStripError as ex:
            log.warn("Ignoring undecodable message", error=str(ex))
            continue

        if isinstance(message, SetBrightnessMessage):
            try:
                surface.set_brightness(message.brightness)
            except LedStripError as ex:
                log.warn("Ignoring invalid brightness", error=str(ex))
                continue
            await surface.show()

        elif isinstance(message, GetLedStripMessage):
            channel.send(LedStripMessage(
                request_id=message.request_id,
                led_strip=surface.get_led_strip(),
            ))

        else:
            log.warn("Ignoring unexpected message", action=message.action)


async def run(args: argparse.Namespace, channel: ProtocolChannel) -> int:
    strip = create_strip(
        pixel_count=args.led_count,
        driver=StripDriver(args.driver),
        gpio_pin=args.gpio_pin,
        color_order=args.color_order,
    )
    surface = LedSurface(strip, brightness=args.brightness, auto_brightness_max_load=args.auto_max_load)

    # Reader must be live before any script code runs
    reader = await open_stdin_reader()
    inbound_task = asyncio.create_task(handle_inbound(reader, surface, channel), name="runtime_inbound")

    def relay_strip(led_strip: List[LedColor]) -> None:
        channel.send(LedStripChangedMessage(led_strip=led_strip))

    surface.on_led_strip_changed(relay_strip)

    script_task = asyncio.create_task(run_script(args.script, surface), name="runtime_script")

    done, _ = await asyncio.wait({inbound_task, script_task}, return_when=asyncio.FIRST_COMPLETED)

    if script_task not in done:
        log.warn("Control process went away, abandoning script")
        script_task.cancel()
        await asyncio.gather(script_task, return_exceptions=True)
        return 1

    inbound_task.cancel()
    await asyncio.gather(inbound_task, return_exceptions=True)

    error: Optional[str] = None
    failure = script_task.exception()
    if failure is not None:
        error = f"{type(failure).__name__}: {failure}"
        traceback.print_exception(type(failure), failure, failure.__traceback__, file=sys.stderr)

    channel.send(FinishedMessage(
        error=error,
        led_strip=surface.get_raw_led_strip(),
        brightness=surface.get_brightness(),
    ))
    return 0 if error is None else 1


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive (received {value})")
    return number


def _brightness(value: str):
    try:
        return parse_brightness(value)
    except ValueError as ex:
        raise argparse.ArgumentTypeError(str(ex)) from None


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="animation_runtime",
        description="Run one LED strip animation script and report over the session protocol.",
    )
    parser.add_argument("--led-count", type=_positive_int, required=True)
    parser.add_argument("--brightness", type=_brightness, default=100)
    parser.add_argument("--auto-max-load", type=float, default=0.5)
    parser.add_argument("--driver", choices=[d.value for d in StripDriver], default=StripDriver.VIRTUAL.value)
    parser.add_argument("--gpio-pin", type=int, default=None)
    parser.add_argument("--color-order", default="GRB")
    parser.add_argument("--log-level", choices=[lvl.name for lvl in LogLevel], default=LogLevel.INFO.name)
    parser.add_argument("script", help="animation script source")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    channel = ProtocolChannel(take_protocol_stream())
    configure_logger(
        min_level=LogLevel[args.log_level],
        use_colors=False,
        stream=sys.stderr,
        prefix="runtime",
        timestamps=False,
    )

    try:
        return asyncio.run(run(args, channel))
    except BrokenPipeError:
        log.warn("Protocol stream closed by the control process")
        return 1
    finally:
        try:
            channel.close()
        except OSError:
            pass


if __name__ == "__main__":
    sys.exit(main())
