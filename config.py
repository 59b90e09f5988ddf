"""
Modwire - Configuration

Centralized configuration for the module installer.
Uses environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


def _split_roots(raw: str) -> List[Path]:
    return [Path(part) for part in raw.split(os.pathsep) if part.strip()]


@dataclass
class InstallerConfig:
    """Module discovery and installation configuration."""
    # Discovery roots, highest priority first
    module_roots: List[Path] = field(
        default_factory=lambda: _split_roots(os.getenv("MODWIRE_MODULE_ROOTS", ""))
    )

    # On-disk convention
    meta_filename: str = field(default_factory=lambda: os.getenv("MODWIRE_META_FILE", "meta.py"))
    payload_filename: str = field(default_factory=lambda: os.getenv("MODWIRE_PAYLOAD_FILE", "payload.py"))

    # Step-by-step debug narration of every run
    verbose: bool = field(default_factory=lambda: os.getenv("MODWIRE_VERBOSE", "false").lower() == "true")


@dataclass
class Config:
    """Main configuration class combining all sub-configs."""
    env: Environment = field(default_factory=lambda: Environment(os.getenv("ENVIRONMENT", "development")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    installer: InstallerConfig = field(default_factory=InstallerConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "env": self.env.value,
            "debug": self.debug,
            "installer": {
                "module_roots": [str(p) for p in self.installer.module_roots],
                "meta_filename": self.installer.meta_filename,
                "payload_filename": self.installer.payload_filename,
                "verbose": self.installer.verbose,
            },
        }


# Singleton configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _config
    _config = None
