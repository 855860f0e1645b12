"""
Unified logging system for the RPG Maker translation tools.

Provides:
- Structured logging with levels (DEBUG, INFO, WARNING, ERROR)
- Rich console output and optional file output
- Timing and progress helpers
- Custom exception hierarchy
"""

from __future__ import annotations

import functools
import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

_console = Console(stderr=True)

# 类型变量用于装饰器
F = TypeVar('F', bound=Callable[..., Any])


# ========================================
# 自定义异常层次结构
# ========================================

class RpgmToolsError(Exception):
    """翻译工具基础异常"""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class FileOperationError(RpgmToolsError):
    """文件操作错误（读取、解析、写入）"""

    def __init__(self, message: str, file_path: Optional[Path] = None, **kwargs):
        details = {"file_path": str(file_path) if file_path else None, **kwargs}
        super().__init__(message, details)
        self.file_path = file_path


class ProjectReadError(FileOperationError):
    """读取工程数据失败（必需文件缺失或 JSON 无法解析）"""


class ConfigurationError(RpgmToolsError):
    """配置错误（缺少必要参数、无效值等）"""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        details = {"config_key": config_key, **kwargs}
        super().__init__(message, details)
        self.config_key = config_key


class UnsupportedEngineError(ConfigurationError):
    """请求了未注册的引擎类型"""

    def __init__(self, engine_type: str, available: Optional[list[str]] = None):
        super().__init__(
            f"Unsupported engine type: {engine_type}",
            config_key="engine",
            available=available or [],
        )
        self.engine_type = engine_type


# ========================================
# 日志类
# ========================================


class TranslationLogger:
    """Logger wrapper with convenience methods."""

    def __init__(
        self,
        name: str = "rpgm_tools",
        level: int = logging.INFO,
        log_file: Optional[Path] = None,
        use_rich: bool = True
    ):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional file path for log output
            use_rich: Use rich formatting for the console handler
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.handlers = []  # Clear existing handlers

        if use_rich:
            console_handler: logging.Handler = RichHandler(
                console=_console,
                rich_tracebacks=True,
                markup=False,
                show_time=True,
                show_path=False
            )
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))

        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            self.logger.addHandler(file_handler)
            # File output needs DEBUG records to reach the handler
            self.logger.setLevel(logging.DEBUG)

    def debug(self, msg: str, *args, **kwargs):
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self.logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        """Log exception with traceback."""
        self.logger.exception(msg, *args, **kwargs)

    @contextmanager
    def timer(self, operation: str, level: int = logging.INFO):
        """
        Context manager for timing operations.

        Usage:
            with logger.timer("Reading project"):
                files = engine.read_project(root)
        """
        start = time.perf_counter()
        self.logger.log(level, f"Starting: {operation}")
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.logger.log(level, f"Completed: {operation} (took {elapsed:.2f}s)")

    @contextmanager
    def progress(self, total: int, description: str = "Processing", disable: bool = False):
        """
        Context manager for progress tracking with Rich.

        Usage:
            with logger.progress(len(files), "Applying") as update:
                for f in files:
                    update(1)
        """
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=_console,
            disable=disable,
        ) as progress:
            task = progress.add_task(description, total=total)

            def update(advance: int = 1):
                progress.update(task, advance=advance)

            yield update


def log_exceptions(
    logger_instance: Optional[TranslationLogger] = None,
    reraise: bool = True,
    default_return: Any = None
) -> Callable[[F], F]:
    """
    装饰器：自动记录函数异常

    Usage:
        @log_exceptions(reraise=False, default_return=1)
        def cmd_extract(args):
            ...
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            log = logger_instance or get_logger()
            try:
                return func(*args, **kwargs)
            except RpgmToolsError as e:
                log.error(f"{func.__name__} failed: {e}")
                if reraise:
                    raise
                return default_return
            except Exception as e:
                log.exception(f"{func.__name__} unexpected error: {e}")
                if reraise:
                    raise
                return default_return
        return wrapper  # type: ignore
    return decorator


# Global logger instance
_default_logger: Optional[TranslationLogger] = None


def get_logger(
    name: str = "rpgm_tools",
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    use_rich: bool = True
) -> TranslationLogger:
    """Get or create the global logger instance."""
    global _default_logger
    if _default_logger is None:
        _default_logger = TranslationLogger(
            name=name,
            level=level,
            log_file=log_file,
            use_rich=use_rich
        )
    return _default_logger


def setup_logger(
    name: str = "rpgm_tools",
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    use_rich: bool = True
) -> TranslationLogger:
    """
    Setup and configure the global logger.

    Modules that log through ``logging.getLogger(__name__)`` inherit the
    handlers installed here because they live under the ``rpgm_tools``
    namespace.
    """
    global _default_logger
    _default_logger = TranslationLogger(
        name=name,
        level=level,
        log_file=log_file,
        use_rich=use_rich
    )
    return _default_logger
