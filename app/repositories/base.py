from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from app.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)


def dialect_insert(db: Session, model: Type[Base]):
    """
    INSERT con soporte de ON CONFLICT para el dialecto activo.

    Los upserts se resuelven en el propio store contra los constraints
    únicos, sin find-then-update en la aplicación.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(model)
    if dialect == "sqlite":
        return sqlite_insert(model)
    raise NotImplementedError(f"Dialecto sin soporte de upsert: {dialect}")


class BaseRepository(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        """
        Repository con operaciones de lectura por defecto.

        Los repositories no hacen commit: la unidad de escritura la
        controla el servicio con store_transaction().
        """
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        """
        Obtener un objeto por su clave primaria.

        Args:
            db: Sesión de base de datos
            id: Clave primaria del objeto

        Returns:
            El objeto solicitado o None si no existe
        """
        return db.get(self.model, id)

    def add(self, db: Session, db_obj: ModelType) -> ModelType:
        """Añade el objeto a la sesión y hace flush para obtener su PK."""
        db.add(db_obj)
        db.flush()
        return db_obj
