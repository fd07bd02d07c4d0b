"""Eventfold Server Configuration."""

import secrets
from dataclasses import dataclass
from pathlib import Path

from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class RemoteStoreConfig:
    """Credentials for the Cloudinary media host."""

    cloud_name: str
    api_key: str
    api_secret: str
    folder: str = "flipbook_albums"


class Settings(BaseSettings):
    # Server
    server_name: str = "Eventfold"
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False

    # Paths
    data_dir: Path = Path.home() / "eventfold" / "data"
    upload_dir: Path = Path.home() / "eventfold" / "uploads"

    # Database
    db_path: Path = Path.home() / "eventfold" / "data" / "eventfold.db"
    database_url: str = ""  # overrides db_path when set

    # JWT
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours
    refresh_token_expire_days: int = 30

    # Cloudinary
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "flipbook_albums"

    # Billing
    starting_credits: int = 1

    # Ingestion pipeline
    upload_window_size: int = 5
    upload_max_files: int = 100
    upload_max_file_mb: int = 50
    transcode_threshold_bytes: int = 5 * 1024 * 1024
    transcode_max_dimension: int = 3000
    transcode_quality: int = 80
    placement_timeout_seconds: float = 120.0  # 0 disables

    model_config = {"env_prefix": "EVENTFOLD_"}

    @property
    def sqlalchemy_url(self) -> str:
        return self.database_url or f"sqlite:///{self.db_path}"

    @property
    def upload_max_file_bytes(self) -> int:
        return self.upload_max_file_mb * 1024 * 1024

    def remote_store_config(self) -> RemoteStoreConfig | None:
        """Cloudinary config, or None when any credential is missing."""
        if not (self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret):
            return None
        return RemoteStoreConfig(
            cloud_name=self.cloudinary_cloud_name,
            api_key=self.cloudinary_api_key,
            api_secret=self.cloudinary_api_secret,
            folder=self.cloudinary_folder,
        )

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.upload_dir, self.db_path.parent]:
            d.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate the JWT secret if not set, persist it so it survives restarts."""
        secrets_file = self.data_dir / ".secrets"
        saved = {}
        if secrets_file.exists():
            for line in secrets_file.read_text().strip().splitlines():
                if "=" in line:
                    k, v = line.split("=", 1)
                    saved[k.strip()] = v.strip()

        if not self.jwt_secret:
            self.jwt_secret = saved.get("jwt_secret", "") or secrets.token_urlsafe(32)

        secrets_file.write_text(f"jwt_secret={self.jwt_secret}\n")


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
