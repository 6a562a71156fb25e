"""
Locates and loads the server selection file (config/servers.json).
"""

import json
import logging
from pathlib import Path

import pydantic

from rookie_cli.exceptions import ConfigError
from rookie_cli.models.servers import ServersConfig

log = logging.getLogger(__name__)

SERVERS_CONFIG_RELATIVE = Path("config") / "servers.json"

# Installed location: next to the package, like a file bundled with a binary.
BUNDLED_SERVERS_CONFIG = Path(__file__).resolve().parent.parent / SERVERS_CONFIG_RELATIVE


def resolve_server_config_path(override: Path | None = None) -> Path:
    """
    Picks the server config file to load.

    An explicit override always wins. Otherwise the bundled copy is used when it
    exists, falling back to config/servers.json under the working directory.
    The returned path may not exist; loading it reports the error.
    """
    if override is not None:
        return override
    if BUNDLED_SERVERS_CONFIG.is_file():
        return BUNDLED_SERVERS_CONFIG
    return (Path.cwd() / SERVERS_CONFIG_RELATIVE).resolve()


def load_server_config(path: Path) -> ServersConfig:
    """
    Loads and validates a server selection file.

    Raises:
        ConfigError: If the file is missing, unreadable, not JSON, or does not
        match the expected schema.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Missing servers config: {path}")

    try:
        raw = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Could not read servers config '{path}': {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid servers config JSON in '{path}': {e}") from e

    if data is None:
        raise ConfigError(f"Invalid servers config JSON in '{path}': document is null.")

    try:
        config = ServersConfig.model_validate(data)
    except pydantic.ValidationError as e:
        raise ConfigError(f"Servers config '{path}' failed validation:\n{e}") from e

    log.debug(f"Loaded {len(config.servers)} server(s) from '{path}'.")
    return config
