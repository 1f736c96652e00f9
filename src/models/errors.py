"""
Core error types

Raised by the LED surface, the session manager and the runtime. The API layer
maps them to DomainError responses (api/middleware/error_handler.py).
"""

from typing import Optional


class LedStripError(Exception):
    """Base class for LED strip / animation errors"""


# === Validation errors (caller gets an explicit rejection) ===

class InvalidBrightnessError(LedStripError, ValueError):
    """Brightness is not an int 0-100 or 'auto'"""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Brightness must be a number between 0 and 100 or 'auto' (received {value!r})."
        )


class InvalidColorError(LedStripError, ValueError):
    """Color is not {red, green, blue} with 0-255 channels"""


class LedIndexError(LedStripError, IndexError):
    """LED index outside the strip"""

    def __init__(self, index: int, led_count: int):
        self.index = index
        self.led_count = led_count
        super().__init__(
            f"Led index must be between 0 and {led_count - 1} (received {index})."
        )


class LedStripLengthError(LedStripError, ValueError):
    """Submitted strip does not match the configured LED count"""

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Led strip must contain exactly {expected} leds (received {received})."
        )


class ScriptValidationError(LedStripError, ValueError):
    """Animation script is empty, does not compile or breaks sandbox rules"""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        super().__init__(message if line is None else f"{message} (line {line})")


# === Session lifecycle errors ===

class AnimationRunningError(LedStripError):
    """Direct strip write attempted while a session owns the strip"""

    def __init__(self):
        super().__init__("An animation is running. Stop it before changing the led strip directly.")


class NoActiveSessionError(LedStripError):
    """Operation requires a running animation session"""

    def __init__(self):
        super().__init__("No animation is running.")


class SpawnFailedError(LedStripError):
    """Runtime process could not be created"""


class SessionEndedError(LedStripError):
    """Session ended while a request was waiting for the runtime"""


class SessionChannelError(LedStripError):
    """Message could not be written to the runtime"""


class RuntimeUnresponsiveError(LedStripError):
    """Runtime did not answer a query in time; the session was torn down"""


class ProtocolError(LedStripError, ValueError):
    """Session protocol line could not be decoded"""


class SandboxViolation(ScriptValidationError):
    """Script uses a construct the animation sandbox forbids (import, private attribute...)"""


# === Auth errors ===

class AuthError(LedStripError):
    """Base class for API-key authentication failures"""


class UnauthorizedError(AuthError):
    """No API key, or an unknown one"""

    def __init__(self, message: str = "Please register first."):
        super().__init__(message)


class ForbiddenError(AuthError):
    """Known user that is not allowed"""

    def __init__(self, message: str = "You are not allowed to do that."):
        super().__init__(message)


class UserExistsError(AuthError):
    """Registration for a name that is already taken"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"User '{name}' already exists.")


class RegistrationPendingError(AuthError):
    """A registration for this name is already waiting for confirmation"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"The user '{name}' is already waiting for confirmation.")


class RegistrationNotPendingError(AuthError):
    """Confirmation for a name nobody is registering"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Could not confirm registration of '{name}'.")
