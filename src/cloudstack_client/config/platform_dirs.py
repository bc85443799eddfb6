"""Platform-specific directory detection for cloudstack-client configuration."""

import os
import sys
from pathlib import Path


def get_config_location() -> Path:
    """Get config location.

    Priority:
    1. CLOUDSTACK_CONFIG_DIR environment variable
    2. Windows: %APPDATA%/cloudstack-client
    3. macOS: ~/Library/Application Support/cloudstack-client
    4. XDG_CONFIG_HOME/cloudstack-client
    5. Fallback: ~/.config/cloudstack-client
    """
    if env_dir := os.environ.get("CLOUDSTACK_CONFIG_DIR"):
        return Path(env_dir)

    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA", str(Path.home()))) / "cloudstack-client"

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "cloudstack-client"

    if xdg := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg) / "cloudstack-client"

    return Path.home() / ".config" / "cloudstack-client"


def get_logs_location() -> Path:
    """Get logs directory location.

    Priority:
    1. CLOUDSTACK_LOG_DIR environment variable
    2. Sibling ``logs`` directory inside the config directory
    """
    if env_dir := os.environ.get("CLOUDSTACK_LOG_DIR"):
        return Path(env_dir)

    return get_config_location() / "logs"


def get_profiles_file() -> Path:
    """Default location of the JSON profile store."""
    return get_config_location() / "profiles.json"
