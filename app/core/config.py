import os
from typing import Any, List, Optional
from functools import lru_cache
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Configurar el logger
logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Permitir campos extra en .env
    )

    # Configuración básica
    API_V1_STR: str = "/api/v1"
    # Orígenes separados por comas
    BACKEND_CORS_ORIGINS: str = ""

    # Información del proyecto
    PROJECT_NAME: str = "ShopWithMe Curation"
    PROJECT_DESCRIPTION: str = "Motor de curación: feed personal, grafo social y votos comunitarios"
    VERSION: str = "0.1.0"

    # Debug mode
    DEBUG_MODE: bool = os.getenv("DEBUG_MODE", "False").lower() in ("true", "1", "t")
    LOG_DIR: str = os.getenv("LOG_DIR", "logs")
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "True").lower() in ("true", "1", "t")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./curation.db")
    SQLALCHEMY_DATABASE_URI: Optional[str] = Field(default=None, validate_default=True)

    # Pool de conexiones (solo aplica a PostgreSQL)
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "20"))
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    DB_STATEMENT_TIMEOUT_MS: int = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "30000"))

    @field_validator("DATABASE_URL", mode="before")
    def ensure_proper_url_format(cls, v: Optional[str]) -> str:
        """Asegura que DATABASE_URL esté en el formato correcto."""
        if not v:
            logger.warning("DATABASE_URL vacía, usando SQLite local")
            return "sqlite:///./curation.db"

        # Asegurar formato postgresql://
        if v.startswith('postgres://'):
            logger.info("Corrigiendo formato de postgres:// a postgresql://")
            return 'postgresql://' + v[len('postgres://'):]
        return v

    @field_validator("SQLALCHEMY_DATABASE_URI", mode="before")
    def assemble_db_connection(cls, v: Optional[str], info) -> Any:
        """Configura la URI de SQLAlchemy basada en DATABASE_URL si no se definió explícitamente."""
        if v:
            return v
        return info.data.get("DATABASE_URL")

    # Feed personal
    FEED_DEFAULT_LIMIT: int = 20
    FEED_MAX_LIMIT: int = 100
    # Número de items recientes entre los que se elige la muestra aleatoria
    FEED_SAMPLE_POOL_SIZE: int = 10

    # Grafo social
    FRIENDS_FEED_FALLBACK_LIMIT: int = 5
    DISCOVER_DEFAULT_LIMIT: int = 50
    FOLLOW_REQUEST_MESSAGE_MAX_LENGTH: int = 280

    # Perfil y shares
    SHARE_MESSAGE_MAX_LENGTH: int = 200
    BIO_MAX_LENGTH: int = 200

    # Imágenes por defecto
    PLACEHOLDER_IMAGE_URL: str = (
        "https://images.unsplash.com/photo-1441986300917-64674bd600d8"
        "?w=400&h=400&fit=crop&random={product_id}"
    )
    AVATAR_FALLBACK_URL: str = (
        "https://ui-avatars.com/api/?name={name}&background=random&color=fff&size=150"
    )

    # Identidades de demo que el collector nunca persiste
    COLLECTOR_IGNORED_DISPLAY_NAMES: str = "John Doe,Mock User"

    @property
    def ignored_display_names(self) -> List[str]:
        return [name.strip() for name in self.COLLECTOR_IGNORED_DISPLAY_NAMES.split(",") if name.strip()]

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return str(self.SQLALCHEMY_DATABASE_URI).startswith("sqlite")


# Usar una función con caché para obtener la configuración
@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    logger.info("Configuración cargada correctamente")
    return settings
