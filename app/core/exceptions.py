"""
Excepciones del motor de curación.

Los conflictos esperados (request duplicada, share duplicado, etc.) NO son
excepciones: se devuelven como `Outcome` dentro de un `OperationResult`.
Aquí solo viven los fallos reales.
"""


class CurationError(Exception):
    """Base para errores del motor de curación."""
    pass


class CatalogValidationError(CurationError):
    """Registro de catálogo inválido (p.ej. sin product id). Nunca sale del collector."""
    pass


class TransientStoreError(CurationError):
    """Fallo de red/almacenamiento. El caller puede reintentar la misma llamada."""

    def __init__(self, message: str, operation: str = ""):
        super().__init__(message)
        self.operation = operation
