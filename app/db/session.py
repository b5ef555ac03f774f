from contextlib import contextmanager
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import get_settings
from app.core.exceptions import TransientStoreError

logger = logging.getLogger(__name__)

# Obtener la instancia de configuración
settings_instance = get_settings()

db_url = str(settings_instance.SQLALCHEMY_DATABASE_URI)

# Ocultar credenciales en el log
display_url = db_url
if '@' in display_url:
    display_url = f"{display_url.split('://')[0]}://***@{display_url.split('@')[1]}"


def build_engine(url: str):
    """Crea el engine con las opciones adecuadas al dialecto."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=settings_instance.DB_POOL_SIZE,
        max_overflow=settings_instance.DB_MAX_OVERFLOW,
        pool_timeout=settings_instance.DB_POOL_TIMEOUT,
        pool_recycle=180,
        connect_args={
            "connect_timeout": 10,
            "options": f"-c statement_timeout={settings_instance.DB_STATEMENT_TIMEOUT_MS}",
        },
    )


engine = build_engine(db_url)
logger.info(f"Engine creado para: {display_url}")

# Crear clase de sesión
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependencia para obtener la sesión de DB
def get_db():
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Error de SQLAlchemy en la sesión: {e}", exc_info=True)
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def store_transaction(db: Session, operation: str = ""):
    """
    Unidad de escritura contra el store.

    Hace commit al salir. Las violaciones de constraint único se relanzan
    tal cual (IntegrityError) porque el caller las traduce a un Outcome;
    cualquier otro fallo del store se convierte en TransientStoreError.

    Uso:
        with store_transaction(db, "vote"):
            db.execute(...)
    """
    try:
        yield db
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Fallo del store en '{operation}': {e}", exc_info=True)
        raise TransientStoreError(str(e), operation=operation) from e
    except Exception:
        db.rollback()
        raise
