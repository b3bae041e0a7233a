"""
Configuration management for the node provisioner.

Every setting can be overridden through environment variables.
"""

import os
from pathlib import Path
from typing import Optional


class Config:
    """Configuration class that reads from environment variables."""

    # Filesystem Layout
    GAIA_HOME: str = os.getenv("GAIA_HOME", os.path.expanduser("~"))
    NODE_PREFIX: str = os.getenv("GAIA_NODE_PREFIX", "gaia-node-")
    INFO_DIR: Optional[str] = os.getenv("GAIA_INFO_DIR", None)  # Defaults to <home>/gaia-node-info

    # Port Allocation
    BASE_PORT: int = int(os.getenv("GAIA_BASE_PORT", "8100"))
    DEFAULT_BASE_NUMBER: int = int(os.getenv("GAIA_DEFAULT_BASE_NUMBER", "100"))  # First instance is this + 1

    # External Installer
    INSTALLER_URL: str = os.getenv(
        "GAIA_INSTALLER_URL",
        "https://github.com/GaiaNet-AI/gaianet-node/releases/latest/download/install.sh"
    )
    COMMAND_TIMEOUT: Optional[float] = (
        float(os.environ["GAIA_COMMAND_TIMEOUT"]) if os.getenv("GAIA_COMMAND_TIMEOUT") else None
    )

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
    )

    @classmethod
    def get_home(cls) -> Path:
        return Path(cls.GAIA_HOME).expanduser()

    @classmethod
    def get_info_dir(cls) -> Path:
        """Directory holding the per-instance info files."""
        if cls.INFO_DIR:
            return Path(cls.INFO_DIR).expanduser()
        return cls.get_home() / "gaia-node-info"

    @classmethod
    def print_config(cls):
        """Print current configuration (useful for debugging)."""
        print("=" * 60)
        print("CONFIGURATION")
        print("=" * 60)
        print(f"Home: {cls.get_home()}")
        print(f"Instance prefix: {cls.NODE_PREFIX}")
        print(f"Info dir: {cls.get_info_dir()}")
        print(f"Base port: {cls.BASE_PORT}")
        print(f"Installer: {cls.INSTALLER_URL}")
        print(f"Command timeout: {cls.COMMAND_TIMEOUT or 'none'}")
        print(f"Log Level: {cls.LOG_LEVEL}")
        print("=" * 60)


# Singleton instance
config = Config()
