from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Library Catalog API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://postgres:postgres@db:5432/catalog_db"

    # HTTP
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = [
        "https://library-eight-brown.vercel.app",
        "https://librarymanagement2.vercel.app",
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Book listing
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
