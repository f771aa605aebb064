"""Application configuration management."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"

# Overrides chatlog_path when set (also read from .env)
ENV_CHATLOG_PATH = "AION_CHATLOG_PATH"

# Standard AION install locations (Gameforge launcher, NCSoft launcher)
_AION_PATHS = [
    Path("D:/Program Files (x86)/GameforgeLive/Games/FRA_fra/AION"),
    Path("C:/Program Files (x86)/GameforgeLive/Games/FRA_fra/AION"),
    Path("C:/Program Files (x86)/GameforgeLive/Games/ENG_eng/AION"),
    Path("C:/Program Files (x86)/GameforgeLive/Games/DEU_deu/AION"),
    Path("C:/Program Files (x86)/NCSOFT/Aion"),
]

# Chat log relative path inside AION install
_CHATLOG_RELATIVE = "Download/Chat.log"


@dataclass
class AppConfig:
    """Application settings."""

    # Paths
    aion_path: str = ""
    chatlog_path: str = ""
    log_encoding: str = "cp1252"

    # Watching
    use_polling: bool = False

    # Link lookup
    codex_base_url: str = "https://aioncodex.com/en"
    lookup_timeout: float = 10.0
    lookup_retries: int = 2
    lookup_outage_cooldown: float = 60.0
    item_cache_path: str = "item_names.db"

    # Window
    window_x: int = 100
    window_y: int = 100
    window_width: int = 640
    window_height: int = 360

    # Debug
    log_level: str = "INFO"

    def save(self, path: str = CONFIG_FILE) -> None:
        """Save config to JSON file."""
        Path(path).write_text(
            json.dumps(asdict(self), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

    @classmethod
    def load(cls, path: str = CONFIG_FILE) -> AppConfig:
        """Load config from JSON file, using defaults for missing fields."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except FileNotFoundError:
            return cls()
        except json.JSONDecodeError as e:
            logger.warning("Ignoring malformed config %s: %s", path, e)
            return cls()

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
        defaults = asdict(cls())
        defaults.update({k: v for k, v in data.items() if k in known})
        return cls(**defaults)


def detect_aion_path() -> str:
    """Try to find the AION installation path."""
    for p in _AION_PATHS:
        if p.exists():
            return str(p)
    return ""


def resolve_chatlog_path(config: AppConfig) -> Path:
    """Resolve the Chat.log path: config, then environment, then install dirs."""
    if config.chatlog_path:
        return Path(config.chatlog_path)

    env_path = os.environ.get(ENV_CHATLOG_PATH, "")
    if env_path:
        return Path(env_path)

    aion_path = config.aion_path or detect_aion_path()
    if aion_path:
        return Path(aion_path) / _CHATLOG_RELATIVE

    return Path("Chat.log")
