"""Configuration for Delve."""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Config:
    """Application configuration."""

    database_url: str = "sqlite:///./delve.db"
    host: str = "localhost"
    port: int = 1965
    certfile: Path | None = None
    keyfile: Path | None = None
    log_level: str = "INFO"
    log_file: Path | None = None
    json_logs: bool = False
    hash_fingerprints: bool = True
    seed: int | None = None  # fixed seed for reproducible dungeons
    view_radius: int = 7

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        certfile = os.getenv("DELVE_CERTFILE")
        keyfile = os.getenv("DELVE_KEYFILE")
        log_file = os.getenv("DELVE_LOG_FILE")
        seed = os.getenv("DELVE_SEED")

        return cls(
            database_url=os.getenv("DELVE_DATABASE_URL", cls.database_url),
            host=os.getenv("DELVE_HOST", cls.host),
            port=int(os.getenv("DELVE_PORT", str(cls.port))),
            certfile=Path(certfile) if certfile else None,
            keyfile=Path(keyfile) if keyfile else None,
            log_level=os.getenv("DELVE_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=os.getenv("DELVE_JSON_LOGS", "").lower()
            in ("true", "1", "yes"),
            hash_fingerprints=os.getenv("DELVE_HASH_FINGERPRINTS", "true").lower()
            not in ("false", "0", "no"),
            seed=int(seed) if seed else None,
            view_radius=int(os.getenv("DELVE_VIEW_RADIUS", str(cls.view_radius))),
        )
