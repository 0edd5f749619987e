"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Storage
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))
    analyses_file: str = field(default_factory=lambda: os.getenv("ANALYSES_FILE", "analyses.json"))
    profiles_file: str = field(default_factory=lambda: os.getenv("PROFILES_FILE", "profiles.json"))

    # Extraction usage budget
    usage_budget_usd: float = field(
        default_factory=lambda: float(os.getenv("USAGE_BUDGET_USD", "5.0"))
    )
    usage_safe_limit_usd: float = field(
        default_factory=lambda: float(os.getenv("USAGE_SAFE_LIMIT_USD", "4.5"))
    )
    max_calls_per_minute: int = field(
        default_factory=lambda: int(os.getenv("MAX_CALLS_PER_MINUTE", "5"))
    )
    max_calls_per_hour: int = field(
        default_factory=lambda: int(os.getenv("MAX_CALLS_PER_HOUR", "30"))
    )

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    @property
    def analyses_path(self) -> str:
        return str(Path(self.data_dir) / self.analyses_file)

    @property
    def profiles_path(self) -> str:
        return str(Path(self.data_dir) / self.profiles_file)

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "data_dir": self.data_dir,
            "analyses_file": self.analyses_file,
            "profiles_file": self.profiles_file,
            "usage_budget_usd": self.usage_budget_usd,
            "usage_safe_limit_usd": self.usage_safe_limit_usd,
            "max_calls_per_minute": self.max_calls_per_minute,
            "max_calls_per_hour": self.max_calls_per_hour,
        }
