import time
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager
import logging

# Importar la función de configuración de logging
from app.core.logging_config import setup_logging

# Llamar a la configuración de logging ANTES de importar/crear otros elementos
setup_logging()

# Ahora importar el resto
from app.api.v1.api import api_router
from app.core.config import get_settings
from app.core.exceptions import TransientStoreError
from app.db.session import engine

logger = logging.getLogger(__name__)

# Obtener la instancia de configuración al inicio del módulo
settings_instance = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Lifespan: Startup iniciado...")

    if settings_instance.is_sqlite:
        # En local y en tests el esquema se crea sin migraciones
        from app.db.base import Base
        Base.metadata.create_all(bind=engine)
        logger.info("Lifespan: Esquema SQLite verificado.")

    yield  # Aplicación en ejecución

    logger.info("Lifespan: Shutdown iniciado...")
    engine.dispose()
    logger.info("Lifespan: Engine cerrado.")


app = FastAPI(
    title=settings_instance.PROJECT_NAME,
    description=settings_instance.PROJECT_DESCRIPTION,
    version=settings_instance.VERSION,
    openapi_url=f"{settings_instance.API_V1_STR}/openapi.json",
    docs_url=f"{settings_instance.API_V1_STR}/docs",
    redoc_url=f"{settings_instance.API_V1_STR}/redoc",
    lifespan=lifespan,
)


STORE_UNAVAILABLE_BODY = {
    "detail": {"outcome": "transient_store_error", "message": "Servicio temporalmente no disponible, reintenta"}
}


@app.exception_handler(TransientStoreError)
async def transient_store_error_handler(request: Request, exc: TransientStoreError):
    """Fallo del store: el cliente revierte su estado optimista y puede reintentar."""
    logger.warning(f"Store no disponible en {request.method} {request.url.path}: {exc.operation}")
    return JSONResponse(status_code=503, content=STORE_UNAVAILABLE_BODY)


@app.exception_handler(SQLAlchemyError)
async def store_read_error_handler(request: Request, exc: SQLAlchemyError):
    """Errores del store fuera de store_transaction (lecturas): mismo 503 que las escrituras."""
    logger.error(f"Error de base de datos en {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content=STORE_UNAVAILABLE_BODY)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    logger.info(f"Middleware: Recibida petición: {request.method} {request.url.path}")

    response = await call_next(request)

    elapsed_ms = (time.time() - start_time) * 1000
    logger.info(
        f"Middleware: Enviando respuesta: {request.method} {request.url.path} "
        f"{response.status_code} ({elapsed_ms:.1f} ms)"
    )
    response.headers["X-Process-Time"] = f"{elapsed_ms:.1f}"
    return response


# Configurar CORS para toda la aplicación
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings_instance.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=86400,  # 24 horas en segundos
)

# Incluir routers
app.include_router(api_router, prefix=settings_instance.API_V1_STR)


# Ruta raíz
@app.get("/")
def root():
    return {
        "message": "Bienvenido a la API",
        "docs": f"{settings_instance.API_V1_STR}/docs",
    }


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings_instance.DEBUG_MODE)
