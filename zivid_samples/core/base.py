"""Component base class. Provides unified configuration, logging and context management."""

import inspect
import logging
import time
import traceback
from abc import ABCMeta
from functools import wraps
from typing import Callable, Optional

from zivid_samples.core.config import SampleSettings
from zivid_samples.core.logger import get_logger
from zivid_samples.core.utils import ifnone

LOGGER_PARAM_NAMES = {
    "log_dir",
    "logger_level",
    "stream_level",
    "file_level",
    "file_mode",
    "propagate",
    "max_bytes",
    "backup_count",
    "use_structlog",
    "structlog_json",
}


class ComponentMeta(type):
    """Metaclass for Component.

    The ComponentMeta metaclass enables classes deriving from Component to use the same default logger within class
    methods as they do within instance methods::

        from zivid_samples.core import Component

        class MyClass(Component):
            def instance_method(self):
                self.logger.info(f"Using logger: {self.logger.name}")  # zivid_samples.my_module.MyClass

            @classmethod
            def class_method(cls):
                cls.logger.info(f"Using logger: {cls.logger.name}")  # zivid_samples.my_module.MyClass
    """

    def __init__(cls, name, bases, attr_dict):
        super().__init__(name, bases, attr_dict)
        cls._logger = None
        cls._config = None
        cls._logger_kwargs = None

    @property
    def logger(cls):
        if cls._logger is None:
            cls._logger = get_logger(cls.unique_name, **(cls._logger_kwargs or {}))
        return cls._logger

    @logger.setter
    def logger(cls, new_logger):
        cls._logger = new_logger

    @property
    def unique_name(cls) -> str:
        return cls.__module__ + "." + cls.__name__

    @property
    def config(cls) -> SampleSettings:
        if cls._config is None:
            cls._config = SampleSettings()
        return cls._config

    @config.setter
    def config(cls, new_config):
        cls._config = new_config


class Component(metaclass=ComponentMeta):
    """Base class for all zivid_samples classes.

    Adds a class and instance level logger, the package settings and context manager support. Any exception raised
    inside a ``with`` block is logged before it propagates (or is suppressed, if ``suppress=True``).
    """

    def __init__(self, suppress: bool = False, *, config: Optional[SampleSettings] = None, **kwargs):
        """
        Initialize the component.

        Args:
            suppress: Whether to suppress exceptions in context manager use.
            config: Settings to use instead of the default ones loaded from the environment and config.ini.
            **kwargs: Logger-related keyword arguments passed to `get_logger`. Valid logger kwargs: log_dir,
                logger_level, stream_level, file_level, file_mode, propagate, max_bytes, backup_count,
                use_structlog, structlog_json.
        """
        remaining_kwargs = {k: v for k, v in kwargs.items() if k not in LOGGER_PARAM_NAMES}
        super().__init__(**remaining_kwargs)

        self.suppress = suppress
        self.config = ifnone(config, default=type(self).config)

        logger_kwargs = {k: v for k, v in kwargs.items() if k in LOGGER_PARAM_NAMES}
        type(self)._logger_kwargs = logger_kwargs
        self.logger = get_logger(self.unique_name, **logger_kwargs)

    @property
    def unique_name(self) -> str:
        return self.__module__ + "." + type(self).__name__

    @property
    def name(self) -> str:
        return type(self).__name__

    def __enter__(self):
        self.logger.debug(f"Initializing {self.name} as a context manager.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.debug(f"Exiting context manager for {self.name}.")
        if exc_type is not None:
            self.logger.exception("Exception occurred", exc_info=(exc_type, exc_val, exc_tb))
            return self.suppress
        return False

    @classmethod
    def autolog(
        cls,
        log_level=logging.DEBUG,
        prefix_formatter: Optional[Callable] = None,
        suffix_formatter: Optional[Callable] = None,
        exception_formatter: Optional[Callable] = None,
        include_duration: bool = True,
    ):
        """Decorator that logs a method call before and after it runs.

        By default the method name, arguments and keyword arguments are logged before the call, and the method name
        and result after it completes, with the call duration appended. Exceptions are logged with their stack trace
        and re-raised. Works for both regular and ``async`` methods; the decorated method must have ``self`` as its
        first argument and ``self.logger`` must exist.

        Example::

            class Writer(Component):
                @Component.autolog()
                def save(self, path):
                    ...

        Args:
            log_level: The log level passed to logger.log().
            prefix_formatter: Called as ``prefix_formatter(function, args, kwargs)`` before the method runs.
            suffix_formatter: Called as ``suffix_formatter(function, result)`` after the method returns.
            exception_formatter: Called as ``exception_formatter(function, error, stack_trace)`` on failure.
            include_duration: If True, append the duration of the wrapped method to the completion and error records.
        """
        prefix_formatter = ifnone(
            prefix_formatter,
            default=lambda function,
            args,
            kwargs: f"Operation {function.__name__} started with args: {args} and kwargs: {kwargs}",
        )
        suffix_formatter = ifnone(
            suffix_formatter,
            default=lambda function, result: f"Operation {function.__name__} completed with result: {result}",
        )
        exception_formatter = ifnone(
            exception_formatter,
            default=lambda function,
            e,
            stack_trace: f"Operation {function.__name__} failed with the following error: {e}\n{stack_trace}",
        )

        def _with_duration(message: str, started_at: float) -> str:
            if not include_duration:
                return message
            return f"{message} | duration_ms={(time.perf_counter() - started_at) * 1000.0:.2f}"

        def decorator(function):
            if inspect.iscoroutinefunction(function):

                @wraps(function)
                async def wrapper(self, *args, **kwargs):
                    self.logger.log(log_level, prefix_formatter(function, args, kwargs))
                    started_at = time.perf_counter()
                    try:
                        result = await function(self, *args, **kwargs)
                    except Exception as e:
                        self.logger.error(
                            _with_duration(exception_formatter(function, e, traceback.format_exc()), started_at)
                        )
                        raise
                    self.logger.log(log_level, _with_duration(suffix_formatter(function, result), started_at))
                    return result

            else:

                @wraps(function)
                def wrapper(self, *args, **kwargs):
                    self.logger.log(log_level, prefix_formatter(function, args, kwargs))
                    started_at = time.perf_counter()
                    try:
                        result = function(self, *args, **kwargs)
                    except Exception as e:
                        self.logger.error(
                            _with_duration(exception_formatter(function, e, traceback.format_exc()), started_at)
                        )
                        raise
                    self.logger.log(log_level, _with_duration(suffix_formatter(function, result), started_at))
                    return result

            return wrapper

        return decorator


class ComponentABCMeta(ComponentMeta, ABCMeta):
    """Metaclass that combines ComponentMeta and ABCMeta, allowing abstract components."""

    pass


class ComponentABC(Component, metaclass=ComponentABCMeta):
    """Abstract base class combining Component functionality with ABC support.

    Use this class to define abstract interfaces (e.g. camera backends) that still get the unified logger and
    settings. Like any ABC, subclasses must implement every abstract method before they can be instantiated.
    """

    pass
