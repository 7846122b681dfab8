"""Application configuration."""
from pathlib import Path
from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url

# Resolve paths against the project directory, not the cwd
_BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Bookstore Catalog"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/bookstore.db"

    # CORS
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    # Asset storage
    asset_dir: Path = _BASE_DIR / "static" / "assets"
    asset_base_url: str = "/static/assets"
    max_upload_size: int = 100 * 1024 * 1024  # 100MB

    # Catalog listing
    default_page_size: int = 12
    max_page_size: int = 100

    # JWT (requester tokens are issued by the auth service)
    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 1440  # 24 hours

    @model_validator(mode="after")
    def resolve_paths(self):
        """Resolve relative asset and SQLite paths against the project directory."""
        if self.asset_dir and not self.asset_dir.is_absolute():
            self.asset_dir = (_BASE_DIR / self.asset_dir).resolve()
        db_path = self.database_path
        if db_path and not db_path.is_absolute():
            url = make_url(self.database_url).set(database=str((_BASE_DIR / db_path).resolve()))
            self.database_url = url.render_as_string(hide_password=False)
        self.asset_base_url = self.asset_base_url.rstrip("/")
        return self

    @property
    def database_path(self) -> Optional[Path]:
        """File behind a SQLite database URL; None for other backends and in-memory databases."""
        url = make_url(self.database_url)
        if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
            return None
        return Path(url.database)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.asset_dir.mkdir(parents=True, exist_ok=True)
        if self.database_path:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
