import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from synapse_register.core.errors import ConfigurationError

TRUTHY = ("true", "1", "yes")
FALSY = ("false", "0", "no", "")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in TRUTHY:
        return True
    if value in FALSY:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


# Configuration dataclass
@dataclass(frozen=True)
class RegistrarConfig:
    homeserver_url: str
    registration_shared_secret: str
    # Verify the homeserver's TLS certificate
    verify_tls: bool = True
    # Accept plain http on non-loopback hosts
    allow_insecure_origin: bool = False
    # Total request timeout in seconds; None leaves it to aiohttp
    request_timeout: Optional[float] = None
    log_level: str = "INFO"

    def __post_init__(self):
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be a positive number of seconds, got {self.request_timeout}")

    @classmethod
    def from_env(cls, env_file: Optional[str] = ".env") -> "RegistrarConfig":
        """Load configuration from environment variables (and .env if present)"""
        if env_file:
            load_dotenv(env_file)
        try:
            timeout = os.getenv("SYNAPSE_REQUEST_TIMEOUT", "")
            return cls(
                homeserver_url=os.getenv("SYNAPSE_HOMESERVER_URL", ""),
                registration_shared_secret=os.getenv("SYNAPSE_REGISTRATION_SHARED_SECRET", ""),
                verify_tls=_env_bool("SYNAPSE_VERIFY_TLS", True),
                allow_insecure_origin=_env_bool("SYNAPSE_ALLOW_INSECURE_ORIGIN", False),
                request_timeout=float(timeout) if timeout else None,
                log_level=os.getenv("LOG_LEVEL", "INFO"),
            )
        except ValueError as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")


# Setup structured logging
def setup_logging(config: RegistrarConfig) -> logging.Logger:
    """Setup structured JSON logging on the synapse_register logger"""
    level = getattr(logging, config.log_level.upper(), None)
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {config.log_level}")

    logger = logging.getLogger("synapse_register")
    logger.setLevel(level)

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

    return logger


class JSONFormatter(logging.Formatter):
    RESERVED = {
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
        "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "created", "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "taskName", "message",
    }

    def format(self, record):
        log_entry = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in self.RESERVED:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)
