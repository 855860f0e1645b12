"""
Configuration management for the RPG Maker translation tools.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional

from ..core.dispatcher import BatchOptions, RetryConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "rpgm_tools.json"


@dataclass
class ToolConfig:
    """Translation pipeline settings."""

    # Engine
    engine: str = "rpgmv"

    # Provider options
    source_language: str = "ja"
    target_language: str = "en"
    batch_size: int = 20
    request_timeout: Optional[float] = 120.0
    continue_on_error: bool = False

    # Retry settings (seconds)
    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_factor: float = 2.0

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        """Clamp invalid values after initialization."""
        if self.batch_size < 1:
            logger.warning(f"batch_size must be >= 1, got {self.batch_size}, using 1")
            self.batch_size = 1
        if self.max_attempts < 1:
            logger.warning(f"max_attempts must be >= 1, got {self.max_attempts}, using 1")
            self.max_attempts = 1
        if self.initial_delay <= 0:
            logger.warning(f"initial_delay must be > 0, got {self.initial_delay}, using 1.0")
            self.initial_delay = 1.0
        if self.max_delay < self.initial_delay:
            logger.warning(
                f"max_delay must be >= initial_delay, got {self.max_delay}, using {self.initial_delay}"
            )
            self.max_delay = self.initial_delay
        if self.backoff_factor <= 0:
            logger.warning(f"backoff_factor must be > 0, got {self.backoff_factor}, using 2.0")
            self.backoff_factor = 2.0
        if self.request_timeout is not None and self.request_timeout <= 0:
            logger.warning(f"request_timeout must be > 0, got {self.request_timeout}, disabling")
            self.request_timeout = None

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            max_delay=self.max_delay,
            backoff_factor=self.backoff_factor,
        )

    def batch_options(self, prompt_type: str = "general") -> BatchOptions:
        return BatchOptions(
            source_language=self.source_language,
            target_language=self.target_language,
            prompt_type=prompt_type,
            batch_size=self.batch_size,
            timeout=self.request_timeout,
            continue_on_error=self.continue_on_error,
        )


class ConfigManager:
    """Manage tool configuration with automatic save/load."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Args:
            config_path: Path to config file. Defaults to ./rpgm_tools.json
        """
        self.config_path = Path(config_path) if config_path else Path.cwd() / DEFAULT_CONFIG_NAME
        self._lock = threading.Lock()
        self.config = self.load()

    def load(self) -> ToolConfig:
        """Load configuration from file, falling back to defaults."""
        if not self.config_path.exists():
            return ToolConfig()

        try:
            data = json.loads(self.config_path.read_text(encoding='utf-8'))
            # Filter out unknown keys to avoid TypeError
            valid_fields = {f.name for f in fields(ToolConfig)}
            return ToolConfig(**{k: v for k, v in data.items() if k in valid_fields})
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config: {e}, using defaults")
            return ToolConfig()
        except OSError as e:
            logger.warning(f"Config file I/O error: {e}, using defaults")
            return ToolConfig()

    def save(self) -> bool:
        """Save configuration to file."""
        try:
            with self._lock:
                self.config_path.parent.mkdir(parents=True, exist_ok=True)
                self.config_path.write_text(
                    json.dumps(asdict(self.config), indent=2, ensure_ascii=False),
                    encoding='utf-8'
                )
            return True
        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self.config, key, default)

    def set(self, key: str, value: Any, auto_save: bool = True) -> bool:
        """Set configuration value."""
        if not hasattr(self.config, key):
            logger.warning(f"Unknown config key: {key}")
            return False

        with self._lock:
            setattr(self.config, key, value)

        if auto_save:
            return self.save()
        return True

    def reset_to_defaults(self) -> bool:
        with self._lock:
            self.config = ToolConfig()
        return self.save()


# Global config instance with thread safety
_config_manager: Optional[ConfigManager] = None
_config_lock = threading.Lock()


def get_config(config_path: Optional[Path] = None) -> ConfigManager:
    """Get global config manager instance (thread-safe singleton)."""
    global _config_manager
    if _config_manager is None:
        with _config_lock:
            # Double-check locking pattern
            if _config_manager is None:
                _config_manager = ConfigManager(config_path)
    return _config_manager
