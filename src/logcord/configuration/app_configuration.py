from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from logcord.configuration.reaction_roles import ReactionRoleRegistry
from logcord.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_ATTRIBUTION_WINDOW_MS = 5000
DEFAULT_DATABASE_PATH = "./data/logcord.db"


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    typed shortcuts for the values the bot needs. A missing or malformed file
    yields an empty mapping and every shortcut falls back to its default.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.error("[APP CONFIGURATION] Config %s is not a mapping; ignoring it.", self.config_path)
            return {}
        return data

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Re-read the YAML file, replace the cache and return it."""
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """The cached mapping. Callers should not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def database_path(self) -> Path:
        """Location of the SQLite routing store."""
        value = self._data.get("database_path") or DEFAULT_DATABASE_PATH
        return Path(str(value)).resolve()

    @property
    def attribution_window_ms(self) -> int:
        """How old an audit log entry may be and still explain an event."""
        value = self._data.get("attribution_window_ms", DEFAULT_ATTRIBUTION_WINDOW_MS)
        try:
            window = int(value)
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Invalid attribution_window_ms %r; using default", value)
            return DEFAULT_ATTRIBUTION_WINDOW_MS
        return max(0, window)

    @property
    def reaction_role_registry(self) -> ReactionRoleRegistry:
        """Immutable reaction-role table built from ``reaction_roles``."""
        return ReactionRoleRegistry.from_mapping(self._data.get("reaction_roles"))


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
