import json
import logging
import time

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Formats each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_event = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_event[key] = value
        if record.exc_info:
            log_event["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_event, ensure_ascii=False, default=str)


class _ManagedHandler(logging.StreamHandler):
    pass


def configure_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """
    Configures the root logger.

    Args:
        level (str): Level name, case-insensitive. Unknown names fall back to INFO.
        fmt (str): "json" for structured output, anything else for plain text.
    """
    level_name = level.upper() if level and level.upper() in _LEVELS else "INFO"

    handler = _ManagedHandler()
    if fmt.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, _ManagedHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level_name)
    return handler
