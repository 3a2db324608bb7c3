import os
from dataclasses import dataclass, field

from services.session_manager import DEFAULT_GRACE_PERIOD_SEC, DEFAULT_SWEEP_INTERVAL_SEC


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    # Seconds a finished game stays readable before removal.
    grace_period_sec: float = DEFAULT_GRACE_PERIOD_SEC
    sweep_interval_sec: float = DEFAULT_SWEEP_INTERVAL_SEC

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.environ.get("HOST", "").strip() or "0.0.0.0",
            port=int(os.environ.get("PORT", "3000")),
            log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
            allowed_origins=_split_origins(os.environ.get("ALLOWED_ORIGINS", "*")),
            grace_period_sec=float(os.environ.get("GRACE_PERIOD_SEC", str(DEFAULT_GRACE_PERIOD_SEC))),
            sweep_interval_sec=float(os.environ.get("SWEEP_INTERVAL_SEC", str(DEFAULT_SWEEP_INTERVAL_SEC))),
        )
