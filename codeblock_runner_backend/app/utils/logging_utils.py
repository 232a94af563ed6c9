import json
import logging
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """JSON log formatter for Filebeat/ELK."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log_record = {
            "level": record.levelname,
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "module": record.name,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        # Extra fields passed through ``logger.info(..., extra={...})``
        for key in ("block", "kind", "mode", "compiler"):
            if hasattr(record, key):
                log_record[key] = getattr(record, key)
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure root logger to output JSON formatted logs."""
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logging.basicConfig(level=level, handlers=[handler])
