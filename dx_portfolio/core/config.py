"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the path to config/.env (relative to this file)
# This file is at: dx_portfolio/core/config.py
# .env is at: config/.env
BASE_DIR = Path(__file__).resolve().parent.parent.parent  # Go up to project root
ENV_FILE = BASE_DIR / "config" / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Все настройки можно переопределить через переменные окружения.
    Пример: DATA_ROOT=/srv/portfolio uvicorn dx_portfolio.main:app
    """

    # =========================================================================
    # Application
    # =========================================================================
    APP_NAME: str = "DX Portfolio"
    DEBUG: bool = False

    # =========================================================================
    # Storage
    # =========================================================================
    # DATA_ROOT - корень приложения: здесь лежат data/ и users/
    DATA_ROOT: Path = BASE_DIR

    # LEGACY_PROJECTS_FILE - плоский projects.json старого формата
    # (путь относительно DATA_ROOT), импортируется при первом запуске
    LEGACY_PROJECTS_FILE: str = "projects.json"

    # =========================================================================
    # Local bridge
    # =========================================================================
    # Сервер слушает только loopback - это мост для UI, а не сетевой сервис
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # CORS_ORIGINS - origins UI, которым разрешено обращаться к мосту.
    # Запрос с любым другим заголовком Origin отклоняется (403).
    # Пример: CORS_ORIGINS='["http://localhost:5173"]'
    CORS_ORIGINS: list[str] = ["http://127.0.0.1:5173", "http://localhost:5173"]

    # =========================================================================
    # Logging
    # =========================================================================
    # LOG_LEVEL - уровень логирования: DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_LEVEL: str = "INFO"

    # LOG_FORMAT - формат логов:
    # "json" - структурированный JSON
    # "simple" - человекочитаемый текст (по умолчанию для десктопа)
    LOG_FORMAT: str = "simple"

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", case_sensitive=True
    )


# Create global settings instance
settings = Settings()
