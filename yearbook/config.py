"""Yearbook Server Configuration."""

import secrets
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    server_name: str = "Yearbook Server"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    public_base_url: str = "http://localhost:3000"

    # Paths
    data_dir: Path = Path.home() / "yearbook" / "data"

    # Database
    db_path: Path = Path.home() / "yearbook" / "data" / "yearbook.db"

    # JWT
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    # Invites
    invite_expire_days: int = 7
    invite_token_bytes: int = 24

    # Class access profiles
    max_profile_photos: int = 4

    model_config = {"env_prefix": "YEARBOOK_"}

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.db_path.parent]:
            d.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate secrets if not set, persist to file so they survive restarts."""
        secrets_file = self.data_dir / ".secrets"
        saved = {}
        if secrets_file.exists():
            for line in secrets_file.read_text().strip().splitlines():
                if "=" in line:
                    k, v = line.split("=", 1)
                    saved[k.strip()] = v.strip()

        if not self.jwt_secret:
            self.jwt_secret = saved.get("jwt_secret", "") or secrets.token_urlsafe(32)

        # Persist for next restart
        secrets_file.write_text(f"jwt_secret={self.jwt_secret}\n")


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
