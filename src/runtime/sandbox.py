"""
Animation sandbox - script validation and execution context

Animation scripts are Python source. Before anything runs, the script is
parsed and walked once: imports, double-underscore names and private
attribute access are rejected. The script then executes against a globals
dict that contains only:

    leds        LedSurfaceProxy over the runtime's surface
    led_count   number of LEDs
    print       writes to the output channel (stderr of the runtime)
    sleep       async timer, await sleep(0.05)
    math, random, colorsys
    a curated set of builtins

Top-level await is allowed, so a script reads like:

    for step in range(100):
        leds.fill_leds({"red": step * 2, "green": 0, "blue": 0})
        await leds.show()
        await sleep(0.02)

The runtime's OS process is the isolation boundary. These checks only take
away the ambient authority a plain exec() would grant.
"""

import ast
import asyncio
import builtins
import colorsys
import inspect
import math
import random
import sys
import types
from typing import Any, Dict, Optional, TextIO

from hardware.led.led_surface import LedSurface
from models.errors import SandboxViolation, ScriptValidationError
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SANDBOX)

SCRIPT_FILENAME = "<animation>"

# Attribute names that reach object internals: format specs, and the frame
# and code objects behind coroutines, generators and tracebacks (a frame's
# f_globals is a module namespace with sys and builtins in it)
FORBIDDEN_ATTRIBUTES = {
    "format", "format_map",
    "gi_frame", "gi_code", "gi_yieldfrom",
    "cr_frame", "cr_code", "cr_await", "cr_origin",
    "ag_frame", "ag_code", "ag_await",
    "f_globals", "f_locals", "f_builtins", "f_back", "f_code", "f_trace",
    "tb_frame", "tb_next",
    "with_traceback",
}

SAFE_BUILTIN_NAMES = (
    "abs", "all", "any", "bool", "callable", "dict", "divmod", "enumerate",
    "filter", "float", "hash", "hex", "int", "isinstance", "iter", "len",
    "list", "map", "max", "min", "next", "pow", "range", "repr", "reversed",
    "round", "set", "slice", "sorted", "str", "sum", "tuple", "zip",
    "Exception", "ArithmeticError", "IndexError", "KeyError",
    "RuntimeError", "StopIteration", "TypeError", "ValueError",
    "ZeroDivisionError",
)


class _ScriptChecker(ast.NodeVisitor):
    """Collects the first sandbox violation in a parsed script"""

    def visit_Import(self, node: ast.Import):
        raise SandboxViolation("Imports are not allowed in animation scripts", node.lineno)

    def visit_ImportFrom(self, node: ast.ImportFrom):
        raise SandboxViolation("Imports are not allowed in animation scripts", node.lineno)

    def visit_Name(self, node: ast.Name):
        if node.id.startswith("__"):
            raise SandboxViolation(f"Name '{node.id}' is not allowed", node.lineno)
        self.generic_visit(node)

    def visit_Attribute(self, node: ast.Attribute):
        if node.attr.startswith("_"):
            raise SandboxViolation(f"Private attribute '{node.attr}' is not allowed", node.lineno)
        if node.attr in FORBIDDEN_ATTRIBUTES:
            raise SandboxViolation(f"Attribute '{node.attr}' is not allowed", node.lineno)
        self.generic_visit(node)


def validate_script(script: str) -> ast.Module:
    """
    Parse a script and check it against the sandbox rules

    Runs in the control process too, so broken scripts are rejected before a
    runtime is spawned.

    Raises:
        ScriptValidationError: empty script or syntax error
        SandboxViolation: forbidden construct
    """
    if not isinstance(script, str) or not script.strip():
        raise ScriptValidationError("Animation script must not be empty")

    try:
        tree = ast.parse(script, filename=SCRIPT_FILENAME, mode="exec")
    except SyntaxError as ex:
        raise ScriptValidationError(f"Invalid animation script: {ex.msg}", ex.lineno) from None

    _ScriptChecker().visit(tree)
    return tree


class LedSurfaceProxy:
    """
    Script-facing view of the LED surface

    Only the public drawing operations are exposed; chaining returns the
    proxy, never the surface itself.
    """

    __slots__ = ("_surface",)

    def __init__(self, surface: LedSurface):
        self._surface = surface

    @property
    def led_count(self) -> int:
        return self._surface.led_count

    def set_brightness(self, value):
        self._surface.set_brightness(value)
        return self

    def get_brightness(self):
        return self._surface.get_brightness()

    def set_led(self, index, color):
        self._surface.set_led(index, color)
        return self

    def fill_leds(self, color):
        self._surface.fill_leds(color)
        return self

    def clear_leds(self):
        self._surface.clear_leds()
        return self

    def set_led_strip(self, colors):
        self._surface.set_led_strip(colors)
        return self

    def get_led_strip(self):
        return self._surface.get_led_strip()

    def get_raw_led_strip(self):
        return self._surface.get_raw_led_strip()

    async def show(self):
        await self._surface.show()
        return self


def _make_print(output: TextIO):
    def script_print(*args, sep: str = " ", end: str = "\n"):
        output.write(sep.join(str(a) for a in args) + end)
        output.flush()
    return script_print


async def sleep(seconds: float) -> None:
    """Timer exposed to scripts"""
    await asyncio.sleep(max(0.0, float(seconds)))


def build_globals(surface: LedSurface, output: Optional[TextIO] = None) -> Dict[str, Any]:
    """Globals dict a script runs against"""
    safe_builtins = {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}
    # class statements need the class builder
    safe_builtins["__build_class__"] = builtins.__build_class__

    return {
        "__builtins__": safe_builtins,
        "__name__": "animation",
        "leds": LedSurfaceProxy(surface),
        "led_count": surface.led_count,
        "print": _make_print(output or sys.stderr),
        "sleep": sleep,
        "math": math,
        "random": random,
        "colorsys": colorsys,
    }


async def run_script(script: str, surface: LedSurface, output: Optional[TextIO] = None) -> None:
    """
    Validate, compile and run a script to completion

    Exceptions raised by the script propagate to the caller.
    """
    tree = validate_script(script)
    code = compile(tree, SCRIPT_FILENAME, "exec", flags=ast.PyCF_ALLOW_TOP_LEVEL_AWAIT)

    log.debug("Running animation script", leds=surface.led_count, lines=len(script.splitlines()))

    result = types.FunctionType(code, build_globals(surface, output))()
    if inspect.iscoroutine(result):
        await result
