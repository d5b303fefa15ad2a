from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from expense_tracker.services.tokens import TokenConfig


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR,
    DB_FILENAME, TOKEN_SECRET_KEY, TOKEN_TTL_HOURS, BCRYPT_ROUNDS, CORS_ORIGINS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Expense Tracker API"
    debug: bool = False
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "expenses.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided
    db_timeout_seconds: float = 5.0

    # Token signing
    token_secret_key: str = "your-secret-key-here-change-in-production"
    token_issuer: str = "expense_tracker_api"
    token_ttl_hours: int = 24
    token_algorithm: str = "HS256"

    # Password hashing cost (bcrypt log rounds, 4..31)
    bcrypt_rounds: int = 12

    enable_api_docs: bool = True

    # Comma-separated browser origins allowed to call the API (CORS_ORIGINS)
    cors_origins: str = (
        "http://localhost:3000,http://localhost:5173,http://localhost:8080"
    )

    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError(
                f"Unsupported bcrypt_rounds '{self.bcrypt_rounds}'. Allowed: 4..31"
            )
        if self.token_ttl_hours <= 0:
            raise ValueError("token_ttl_hours must be positive")

    def token_config(self) -> TokenConfig:
        return TokenConfig(
            secret_key=self.token_secret_key,
            issuer=self.token_issuer,
            ttl_hours=self.token_ttl_hours,
            algorithm=self.token_algorithm,
        )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
