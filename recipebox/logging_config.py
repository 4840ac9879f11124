"""
Logging configuration for the API process.

Probe requests are kept out of the uvicorn access log, and anything that
looks like a credential is masked before a record is emitted.
"""

import logging
import logging.config
import re
from typing import Any, Dict

PROBE_PATHS = ("/healthz", "/health")

_SECRET_PATTERNS = [
    re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+"),
    re.compile(r"(\w*session=)[^;\s]+"),
    re.compile(r"""(["']?password["']?\s*[:=]\s*["']?)[^"',\s}]+""", re.IGNORECASE),
]


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for liveness and readiness probes."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        # uvicorn passes (client, method, path, http_version, status)
        args = record.args if isinstance(record.args, tuple) else ()
        if len(args) >= 3 and args[1] == "GET":
            path = str(args[2]).split("?", 1)[0]
            return path not in PROBE_PATHS
        return True


class RedactSecretsFilter(logging.Filter):
    """Mask bearer tokens, session cookies and password fields."""

    mask = "***"

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = message
        for pattern in _SECRET_PATTERNS:
            redacted = pattern.sub(lambda m: m.group(1) + self.mask, redacted)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Build the dictConfig for the given level."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {"()": HealthCheckFilter},
            "redact_secrets": {"()": RedactSecretsFilter},
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "access": {
                "format": "%(asctime)s - access - %(message)s"
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["redact_secrets"],
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"],
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
            "recipebox": {"handlers": ["default"], "level": level, "propagate": False},
        },
        "root": {"level": level, "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration once at startup."""
    logging.config.dictConfig(get_logging_config(level))
