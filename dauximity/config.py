"""
Server configuration read from the environment
"""
import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    ws_heartbeat: float = 30.0
    rate_limit: int = 100
    max_message_length: int = 2000
    max_name_length: int = 64
    demo_rooms: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.environ.get("SERVER_HOST", cls.host),
            port=_env_int("PORT", cls.port),
            log_level=os.environ.get("LOG_LEVEL", cls.log_level).upper(),
            ws_heartbeat=float(_env_int("DAUX_WS_HEARTBEAT", int(cls.ws_heartbeat))),
            rate_limit=_env_int("DAUX_RATE_LIMIT", cls.rate_limit),
            max_message_length=_env_int("DAUX_MAX_MESSAGE_LENGTH", cls.max_message_length),
            max_name_length=_env_int("DAUX_MAX_NAME_LENGTH", cls.max_name_length),
            demo_rooms=_env_bool("DAUX_DEMO_ROOMS", cls.demo_rooms),
        )
