"""
Logging Utility Module for dbschemas
Provides structured logging with handler context
"""
from __future__ import annotations

import json
import logging
import sys
import threading
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Generator, Optional

# Thread-local storage for handler context
_thread_local = threading.local()


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter for production environments"""
    
    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        
        handler_name = getattr(_thread_local, 'handler_name', None)
        if handler_name:
            log_entry["handler"] = handler_name
        
        # Add extra fields
        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)
        
        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        
        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter for development"""
    
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'
    
    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        
        handler_name = getattr(_thread_local, 'handler_name', None)
        prefix = f"[{handler_name}] " if handler_name else ""
        
        timestamp = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        
        formatted = (
            f"{color}{timestamp} | {record.levelname:8s}{self.RESET} | "
            f"{record.name:30s} | {prefix}{record.getMessage()}"
        )
        
        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"
        
        return formatted


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that includes context information"""
    
    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get('extra', {})
        
        if hasattr(_thread_local, 'handler_name'):
            extra['handler_name'] = _thread_local.handler_name
        
        kwargs['extra'] = extra
        return msg, kwargs


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON structured logging (for production)
        log_file: Optional file path for logging
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    
    # Remove existing handlers
    root_logger.handlers.clear()
    
    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    if json_format:
        console_handler.setFormatter(StructuredFormatter())
    else:
        console_handler.setFormatter(ConsoleFormatter())
    root_logger.addHandler(console_handler)
    
    # File handler (if specified)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)
    
    # Quiet chatty drivers
    for logger_name in ['mysql.connector', 'psycopg2']:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger"""
    base_logger = logging.getLogger(name)
    return ContextLogger(base_logger, {})


def get_handler_context() -> Optional[str]:
    """Get the handler name tagged on the current thread"""
    return getattr(_thread_local, 'handler_name', None)


@contextmanager
def log_context(handler: Optional[str] = None) -> Generator[None, None, None]:
    """
    Context manager tagging log records with the active handler
    
    Usage:
        with log_context(handler="database"):
            logger.info("Listing tables")
    """
    old_handler = getattr(_thread_local, 'handler_name', None)
    
    try:
        if handler:
            _thread_local.handler_name = handler
        yield
    finally:
        if old_handler:
            _thread_local.handler_name = old_handler
        elif hasattr(_thread_local, 'handler_name'):
            delattr(_thread_local, 'handler_name')


@contextmanager
def log_operation(
    logger: ContextLogger,
    operation: str,
    **extra_fields: Any
) -> Generator[Dict[str, Any], None, None]:
    """
    Context manager for logging operation timing
    
    Usage:
        with log_operation(logger, "draft", handlers=["database"]) as ctx:
            schema = handler.draft()
            ctx['tables'] = len(schema.tables)
    """
    start_time = time.time()
    context: Dict[str, Any] = {"operation": operation, **extra_fields}
    
    logger.debug(f"Starting {operation}", extra={"extra_fields": context})
    
    try:
        yield context
        elapsed = time.time() - start_time
        context['duration_ms'] = round(elapsed * 1000, 2)
        context['status'] = 'success'
        logger.info(f"Completed {operation}", extra={"extra_fields": context})
    except Exception as e:
        elapsed = time.time() - start_time
        context['duration_ms'] = round(elapsed * 1000, 2)
        context['status'] = 'error'
        context['error'] = str(e)
        context['error_type'] = type(e).__name__
        logger.error(f"Failed {operation}", extra={"extra_fields": context}, exc_info=True)
        raise
