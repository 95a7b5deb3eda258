"""
chainprim Configuration
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, asdict
from typing import List, Optional

from chainprim.constants import DEFAULT_HASH_BACKEND, HASH_BACKENDS
from chainprim.crypto.hash import Hasher, get_hasher
from chainprim.errors import InvalidConfigError

logger = logging.getLogger(__name__)


@dataclass
class HashConfig:
    """Hash primitive configuration."""
    backend: str = DEFAULT_HASH_BACKEND


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "WARNING"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 10
    backup_count: int = 3


@dataclass
class ChainPrimConfig:
    """
    Complete configuration.

    Values only select bindings and logging; they never change the wire
    format.
    """
    hash: HashConfig = field(default_factory=HashConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def hasher(self) -> Hasher:
        """Return the configured hash primitive."""
        return get_hasher(self.hash.backend)

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        backend = self.hash.backend
        if not isinstance(backend, str) or backend.lower() not in HASH_BACKENDS:
            errors.append(f"Unknown hash backend: {self.hash.backend}")

        level = self.log.level
        if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
            errors.append(f"Unknown log level: {self.log.level}")

        if self.log.max_size_mb < 1:
            errors.append("max_size_mb must be at least 1")

        if self.log.backup_count < 0:
            errors.append("backup_count cannot be negative")

        return errors

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> "ChainPrimConfig":
        """
        Load configuration from file.

        Raises:
            InvalidConfigError: If the loaded configuration fails validation
        """
        with open(path, 'r') as f:
            data = json.load(f)

        config = cls()

        try:
            if "hash" in data:
                config.hash = HashConfig(**data["hash"])

            if "log" in data:
                config.log = LogConfig(**data["log"])
        except TypeError as e:
            raise InvalidConfigError([str(e)]) from None

        errors = config.validate()
        if errors:
            raise InvalidConfigError(errors)

        logger.info(f"Configuration loaded from {path}")
        return config

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "hash": asdict(self.hash),
            "log": asdict(self.log),
        }


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.WARNING)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
        force=True,
    )
