from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = Field(
        "postgresql+asyncpg://statebook:statebook_dev@db:5432/statebook",
        validation_alias=AliasChoices("DATABASE_URL", "POSTGRES_URL"),
    )
    DB_ECHO: bool = False

    # Uploads
    UPLOAD_MAX_SIZE_MB: int = 4

    # Storage
    STORAGE_BACKEND: str = "local"
    STORAGE_LOCAL_PATH: str = "./storage"
    BLOB_API_URL: str = "https://blob.vercel-storage.com"
    BLOB_READ_WRITE_TOKEN: str = ""

    # Editor
    AUTOSAVE_DEBOUNCE_MS: int = 500
    DEFAULT_LANG: str = "en"

    # App
    ALLOWED_ORIGINS: str = "*"
    APP_ENV: str = "development"
    APP_URL: str = "http://localhost:8000"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
