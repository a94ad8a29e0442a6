import json
import logging
import os

DEFAULT_LOG_FILE = "/tmp/wikitext-sync.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers kept at WARNING unless debugging
_NOISY_LOGGERS = ("urllib3", "requests", "charset_normalizer")


class JsonFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, msg and optional exc."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(
    debug: bool = False,
    log_file: str | None = None,
    level: str | None = None,
    debug_format: str = "text",
) -> None:
    """
    Configure file logging for the MCP server.

    Records never go to stdout, which carries JSON-RPC.  Calling this
    again replaces the previous handlers, so the lifespan can re-apply
    the ``logging:`` section of the YAML config once it is loaded.

    Args:
        debug: Force DEBUG regardless of LOG_LEVEL or *level*.
        log_file: Log file path (overrides LOG_FILE).
        level: Level name from the config file, used when LOG_LEVEL is unset.
        debug_format: "text" or "json".

    Environment variables:
        LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. Default: WARNING.
        LOG_FILE: Log file path. Default: /tmp/wikitext-sync.log
    """
    level_name = (os.getenv("LOG_LEVEL") or level or "WARNING").upper()
    log_level = (
        logging.DEBUG if debug else getattr(logging, level_name, logging.WARNING)
    )

    path = log_file or os.getenv("LOG_FILE", DEFAULT_LOG_FILE)
    handler = logging.FileHandler(path, mode="a")
    if debug_format == "json":
        handler.setFormatter(JsonFormatter(datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] [%(levelname)s] %(name)s %(message)s",
                datefmt=DATE_FORMAT,
            )
        )

    logging.basicConfig(level=log_level, handlers=[handler], force=True)

    if log_level != logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
