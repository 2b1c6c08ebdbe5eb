"""Configuration helpers for the Smart Closet app."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_DATABASE_PATH = "data/closet.db"


@dataclass
class ClosetConfig:
    """Configuration values for the closet core.

    Defaults mirror the behaviour of the mobile app: items count as unworn
    after 30 days, top lists hold five items and color combinations are drawn
    from the last 50 diary entries.
    """

    database_path: str = DEFAULT_DATABASE_PATH
    unworn_days: int = 30
    top_items_limit: int = 5
    color_history_limit: int = 50
    recent_outfits_limit: int = 5
    reader_threads: int = 2
    event_reminder_minutes: int = 60
    random_seed: Optional[int] = None
    log_level: str = "INFO"
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "ClosetConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is overridden key by key by upper-cased environment
        variables.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("CLOSET_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        def get_int(key: str, default: int) -> int:
            raw = get_value(key)
            if raw in (None, ""):
                return default
            try:
                return int(raw)
            except ValueError as exc:
                raise ValueError(f"Configuration value '{key}' must be an integer, got {raw!r}") from exc

        seed_raw = get_value("random_seed")

        return cls(
            database_path=str(get_value("closet_db_path", DEFAULT_DATABASE_PATH) or DEFAULT_DATABASE_PATH),
            unworn_days=get_int("unworn_days", 30),
            top_items_limit=get_int("top_items_limit", 5),
            color_history_limit=get_int("color_history_limit", 50),
            recent_outfits_limit=get_int("recent_outfits_limit", 5),
            reader_threads=get_int("reader_threads", 2),
            event_reminder_minutes=get_int("event_reminder_minutes", 60),
            random_seed=int(seed_raw) if seed_raw not in (None, "") else None,
            log_level=str(get_value("log_level", "INFO") or "INFO"),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
