"""
Structured Logging Configuration Module

Every ledger module logs through a child of the "retail_ledger" logger.
Records may carry three structured attributes (action, resource, extra)
which the JSON formatter emits as top-level fields.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


STRUCTURED_FIELDS = ("action", "resource", "extra")

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record"""
    
    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in STRUCTURED_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        
        return json.dumps(entry, default=str)


def setup_logging(level: Optional[str] = None, logger_name: str = "retail_ledger",
                  fmt: Optional[str] = None) -> logging.Logger:
    """
    Attach a single stream handler to the package logger.
    
    Args:
        level: Level name; LedgerConfig.log_level when omitted
        logger_name: Logger to configure
        fmt: "json" or "text"; LedgerConfig.log_format when omitted
        
    Returns:
        The configured logger
    """
    if level is None or fmt is None:
        from .config import get_config
        settings = get_config()
        level = level or settings.log_level
        fmt = fmt or settings.log_format
    
    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger


def get_logger(name: str = "retail_ledger") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               extra: Optional[Dict[str, Any]] = None) -> None:
    """
    Emit a record carrying the structured fields.
    
    Args:
        logger: Module logger
        level: Level name (info, warning, ...)
        message: Human-readable message
        action: Operation name, e.g. "withdrawal"
        resource: Entity acted on, e.g. "account:1212"
        extra: JSON-compatible details
    """
    levelno = logging.getLevelName(level.upper())
    if not logger.isEnabledFor(levelno):
        return
    
    fields = {"action": action, "resource": resource, "extra": extra}
    logger.log(levelno, message, extra={k: v for k, v in fields.items() if v})
