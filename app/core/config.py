from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "store-ops"
    debug: bool = False
    log_level: str = "INFO"

    # DB settings
    database_url: str = "sqlite+aiosqlite:///./store_ops.db"
    database_name_prefix: str = "astra"

    # Paging
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=500, ge=1)


settings = Settings()
