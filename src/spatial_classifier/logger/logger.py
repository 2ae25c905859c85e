import os
import threading
from datetime import datetime
from enum import Enum

from .local_file_strategy import LocalFileStrategy


class Logger:
    """
    Static logger for layout events.

    Nothing is written until a storage strategy is installed, either by
    ``initialize()`` or ``set_log_storage_strategy()``. Entries below
    ``min_priority`` are dropped before they reach the strategy.

    Priorities used by the layout:
        DEBUG    simulation build/stop, rebuilds, drags, teardown
        INFO     zone changes, boundary changes, scenario replacement, run summary
        WARNING  write-back for an unknown node id
    """

    class LogPriority(Enum):
        DEBUG = 1
        INFO = 2
        WARNING = 3
        ERROR = 4
        CRITICAL = 5

    DEFAULT_LOG_PATH = "/tmp/spatial_classifier_logs.txt"
    LOG_PATH_ENV = "SPATIAL_CLASSIFIER_LOG_PATH"
    LOG_LEVEL_ENV = "SPATIAL_CLASSIFIER_LOG_LEVEL"
    TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

    is_logging_enabled = True
    min_priority = LogPriority.DEBUG
    log_storage_strategy = None
    _lock = threading.RLock()

    @classmethod
    def initialize(cls):
        """
        Install the file strategy unless one is already set.

        SPATIAL_CLASSIFIER_LOG_PATH overrides the file path and
        SPATIAL_CLASSIFIER_LOG_LEVEL (a priority name) the minimum priority.
        """
        with cls._lock:
            if cls.log_storage_strategy is not None:
                return
            level = os.getenv(cls.LOG_LEVEL_ENV)
            if level:
                cls.set_min_priority(level)
            file_location = os.getenv(cls.LOG_PATH_ENV, cls.DEFAULT_LOG_PATH)
            cls.log_storage_strategy = LocalFileStrategy(file_location)
            cls.log(f"Layout log opened at {file_location}", cls.LogPriority.INFO)

    @classmethod
    def set_min_priority(cls, priority):
        """
        Drop entries below ``priority`` (a LogPriority or its name).

        Raises:
            ValueError: For an unknown priority name.
        """
        if isinstance(priority, str):
            try:
                priority = cls.LogPriority[priority.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown log priority: {priority!r}")
        with cls._lock:
            cls.min_priority = priority

    @classmethod
    def log(cls, message, priority=LogPriority.DEBUG):
        """
        Hand one entry to the installed strategy.

        Parameters:
        message (str): Event text.
        priority (LogPriority): Entry priority (default DEBUG).
        """
        with cls._lock:
            if not cls.is_logging_enabled or cls.log_storage_strategy is None:
                return
            if priority.value < cls.min_priority.value:
                return
            cls.log_storage_strategy.store_log(
                message, priority.name, datetime.now().strftime(cls.TIMESTAMP_FORMAT)
            )

    @classmethod
    def set_log_storage_strategy(cls, log_storage_strategy):
        with cls._lock:
            cls.log_storage_strategy = log_storage_strategy

    @classmethod
    def reset(cls):
        """Detach the strategy, re-enable logging and accept every priority."""
        with cls._lock:
            cls.log_storage_strategy = None
            cls.is_logging_enabled = True
            cls.min_priority = cls.LogPriority.DEBUG

    @classmethod
    def flush_logs(cls):
        with cls._lock:
            if cls.is_logging_enabled and cls.log_storage_strategy:
                cls.log_storage_strategy.flush_logs()

    @classmethod
    def disable_logging(cls):
        cls.log("Logging disabled", cls.LogPriority.INFO)
        cls.is_logging_enabled = False

    @classmethod
    def enable_logging(cls):
        cls.is_logging_enabled = True
        cls.log("Logging enabled", cls.LogPriority.INFO)
