"""
Middleware for EventBus

Middleware = pipeline functions that process events before handlers.
Can modify events, block events, or log/validate events.
"""

from models.events import Event
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)


def _summarize(value) -> str:
    # Strips are long; show the length only
    if isinstance(value, list):
        return f"[{len(value)} items]"
    if hasattr(value, "value") and hasattr(value, "name"):
        return str(value.value)
    return str(value)


def log_middleware(event: Event) -> Event:
    """
    Log all events for debugging

    Usage:
        event_bus.add_middleware(log_middleware)
    """
    source_str = event.source.name if event.source else "-"
    data_str = ", ".join(f"{k}={_summarize(v)}" for k, v in event.to_data().items())

    log.debug(f"Event: {event.type.name} from {source_str} | {data_str}")
    return event
