import os
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", 30))

    # Full SQLAlchemy URL wins over the individual DB_* parts
    DATABASE_URL: str | None = os.getenv("DATABASE_URL")
    DB_USER: str | None = os.getenv("DB_USER")
    DB_PASS: str | None = os.getenv("DB_PASS")
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    INVENTORY_DB_NAME: str = os.getenv("INVENTORY_DB_NAME", "it_inventory")

    # Business rules
    MAX_ACTIVE_ASSIGNMENTS_PER_USER: int = int(
        os.getenv("MAX_ACTIVE_ASSIGNMENTS_PER_USER", 5))
    BULK_ASSET_LIMIT: int = int(os.getenv("BULK_ASSET_LIMIT", 100))
    BULK_ASSIGNMENT_LIMIT: int = int(os.getenv("BULK_ASSIGNMENT_LIMIT", 50))
    # Refuse to delete assets that have maintenance history
    STRICT_ASSET_DELETE: bool = os.getenv(
        "STRICT_ASSET_DELETE", "True").lower() == "true"
    WARRANTY_ALERT_DAYS: int = int(os.getenv("WARRANTY_ALERT_DAYS", 30))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:8002"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

if settings.DATABASE_URL:
    INVENTORY_DATABASE_URL = settings.DATABASE_URL
else:
    INVENTORY_DATABASE_URL = (
        f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.INVENTORY_DB_NAME}"
    )
