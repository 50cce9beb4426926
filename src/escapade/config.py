"""Configuration for Escapade."""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Config:
    """Application configuration."""

    database_url: str = "sqlite:///./escapade.db"
    host: str = "localhost"
    port: int = 1965
    certfile: Path | None = None
    keyfile: Path | None = None
    log_level: str = "INFO"
    log_file: Path | None = None
    json_logs: bool = False
    hash_fingerprints: bool = True
    world_file: Path | None = None
    lockpick_tries: int = 5

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        certfile = os.getenv("ESCAPADE_CERTFILE")
        keyfile = os.getenv("ESCAPADE_KEYFILE")
        log_file = os.getenv("ESCAPADE_LOG_FILE")
        world_file = os.getenv("ESCAPADE_WORLD_FILE")

        return cls(
            database_url=os.getenv("ESCAPADE_DATABASE_URL", cls.database_url),
            host=os.getenv("ESCAPADE_HOST", cls.host),
            port=int(os.getenv("ESCAPADE_PORT", str(cls.port))),
            certfile=Path(certfile) if certfile else None,
            keyfile=Path(keyfile) if keyfile else None,
            log_level=os.getenv("ESCAPADE_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=os.getenv("ESCAPADE_JSON_LOGS", "").lower()
            in ("true", "1", "yes"),
            hash_fingerprints=os.getenv("ESCAPADE_HASH_FINGERPRINTS", "true").lower()
            not in ("false", "0", "no"),
            world_file=Path(world_file) if world_file else None,
            lockpick_tries=int(
                os.getenv("ESCAPADE_LOCKPICK_TRIES", str(cls.lockpick_tries))
            ),
        )
