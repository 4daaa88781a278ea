"""
Logging system for MCP App Builder
"""

import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import Optional


def setup_logger(
    name: str = "mcp_builder",
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    debug: bool = False
) -> logging.Logger:
    """
    Set up logging for MCP App Builder

    Args:
        name: Logger name
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        debug: Enable debug mode with more detailed logging

    Returns:
        Configured logger instance
    """

    # Create logger
    logger = logging.getLogger(name)
    level = logging.DEBUG if debug else getattr(logging, log_level.upper())
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers.clear()

    # Create formatters
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
    )

    simple_formatter = logging.Formatter('%(message)s')

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(simple_formatter if not debug else detailed_formatter)
    logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Rotating file handler to prevent log files from growing too large
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    # Performance logger for timing validation, generation and test runs
    perf_logger = logging.getLogger(f"{name}.performance")
    perf_logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    logger.debug(f"Logging system initialized - Level: {log_level}")
    if debug:
        logger.debug("Debug mode enabled")

    return logger


def get_performance_logger() -> logging.Logger:
    """Get the performance logger for timing critical operations"""
    return logging.getLogger("mcp_builder.performance")


class PerformanceTimer:
    """Context manager for timing operations"""

    def __init__(self, operation_name: str = "Operation", logger: Optional[logging.Logger] = None):
        self.operation_name = operation_name
        self.logger = logger or get_performance_logger()
        self.start_time = None
        self.elapsed_time = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.elapsed_time = time.perf_counter() - self.start_time
            self.logger.debug(f"{self.operation_name}: {self.elapsed_time:.3f}s")
