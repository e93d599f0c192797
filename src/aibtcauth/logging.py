import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

# Event fields whose values are credentials and must never reach the log output
REDACTED_FIELDS = frozenset({"authorization", "signature", "session_token", "sessionToken", "shared_key"})
REDACTED = "[redacted]"


def redact_secrets(_logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Replace credential values in an event, whichever module logged them."""
    for key in REDACTED_FIELDS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def setup_logging(debug: bool) -> None:
    """Route stdlib and structlog output through one pipeline; uvicorn's loggers propagate to it."""
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format="%(message)s")

    # The driver's own loggers are only interesting when something breaks
    for name in ("pymongo", "pymongo.topology", "pymongo.connection", "pymongo.command"):
        logging.getLogger(name).setLevel(logging.WARNING)
    # Access lines carry nothing the auth events do not already record
    logging.getLogger("uvicorn.access").setLevel(logging.INFO if debug else logging.WARNING)

    renderer: structlog.types.Processor
    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            redact_secrets,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
