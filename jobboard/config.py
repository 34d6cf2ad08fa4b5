from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    # Entity backend
    backend: str = "local"  # local | remote

    # Local backend database
    database_url: str = "sqlite+aiosqlite:///./jobboard.db"

    # Hosted backend
    lumi_project_id: str = ""
    lumi_api_base_url: str = "https://api.lumi.new"
    lumi_auth_origin: str = "https://auth.lumi.new"
    request_timeout_s: float = 15.0

    # App
    allowed_origins: str = ""
    log_level: str = "INFO"
    debug: bool = False

    def get_allowed_origins(self) -> list[str]:
        """Comma-separated ALLOWED_ORIGINS as a list, always including local dev."""
        origins = ["http://localhost:3000", "http://localhost:5173"]
        origins.extend(o.strip() for o in self.allowed_origins.split(",") if o.strip())
        return origins


settings = Settings()
