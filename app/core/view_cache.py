"""
Cache de vista por sesión con mutaciones optimistas en dos fases.

El cliente muestra el cambio antes de que la escritura termine:

    change = cache.apply_optimistic(key, mutate, write)   # estado optimista visible
    result = cache.commit(change)                          # escribe y reconcilia
    # o cache.rollback(change) si el caller aborta

Si la escritura falla (TransientStoreError o un OperationResult no OK) el
valor de la clave vuelve al estado previo a la llamada.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, Optional, TypeVar
from uuid import uuid4

from app.core.exceptions import TransientStoreError
from app.core.outcomes import OperationResult
from app.models.shared_item import VoteType
from app.schemas.shared_item import VoteTally

logger = logging.getLogger(__name__)

S = TypeVar("S")

_MISSING = object()


class ChangeState(str, Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class PendingChange(Generic[S]):
    key: str
    previous: Any
    optimistic: S
    write: Callable[[], Any]
    reconcile: Optional[Callable[[Any], S]] = None
    change_id: str = field(default_factory=lambda: uuid4().hex)
    state: ChangeState = ChangeState.PENDING


class ViewCache:
    """Cache que vive durante la sesión del cliente"""

    def __init__(self):
        self.cache: Dict[str, Any] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        if key in self.cache:
            self.hits += 1
            return self.cache[key]
        self.misses += 1
        return None

    def set(self, key: str, value: Any) -> None:
        self.cache[key] = value

    def invalidate(self, key: str) -> None:
        self.cache.pop(key, None)

    def apply_optimistic(
        self,
        key: str,
        mutate: Callable[[Optional[Any]], S],
        write: Callable[[], Any],
        reconcile: Optional[Callable[[Any], S]] = None,
    ) -> PendingChange[S]:
        """
        Aplica el cambio en la vista sin tocar el store.

        Args:
            key: Clave de la vista (p.ej. "tally:<id>")
            mutate: Función pura estado_actual -> estado_optimista
            write: Escritura real, se ejecuta en commit()
            reconcile: Convierte el resultado de write en el valor autoritativo

        Returns:
            PendingChange para pasar a commit() o rollback()
        """
        previous = self.cache.get(key, _MISSING)
        optimistic = mutate(None if previous is _MISSING else previous)
        self.cache[key] = optimistic
        return PendingChange(
            key=key, previous=previous, optimistic=optimistic, write=write, reconcile=reconcile
        )

    def commit(self, change: PendingChange) -> Any:
        """
        Ejecuta la escritura. En éxito guarda el valor reconciliado; en fallo
        restaura el estado previo.

        Raises:
            TransientStoreError: tras restaurar el estado previo
            ValueError: si el cambio ya fue confirmado o revertido

        Cualquier otra excepción de la escritura también revierte la vista
        antes de propagarse.
        """
        if change.state != ChangeState.PENDING:
            raise ValueError(f"El cambio {change.change_id} ya está {change.state.value}")

        try:
            result = change.write()
        except TransientStoreError:
            logger.warning(f"Escritura fallida para '{change.key}', revirtiendo vista")
            self.rollback(change)
            raise
        except Exception:
            logger.exception(f"Error inesperado escribiendo '{change.key}', revirtiendo vista")
            self.rollback(change)
            raise

        if isinstance(result, OperationResult) and not result.ok:
            logger.info(f"Escritura rechazada para '{change.key}' ({result.outcome.value}), revirtiendo vista")
            self.rollback(change)
            return result

        change.state = ChangeState.COMMITTED
        if change.reconcile is not None:
            self.cache[change.key] = change.reconcile(result)
        return result

    def rollback(self, change: PendingChange) -> None:
        """Restaura el valor que tenía la clave antes de apply_optimistic."""
        if change.state != ChangeState.PENDING:
            return
        if change.previous is _MISSING:
            self.cache.pop(change.key, None)
        else:
            self.cache[change.key] = change.previous
        change.state = ChangeState.ROLLED_BACK

    def get_stats(self) -> Dict:
        total = self.hits + self.misses
        hit_rate = (self.hits / total * 100) if total > 0 else 0
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": f"{hit_rate:.1f}%",
            "keys_cached": len(self.cache)
        }


def tally_key(shared_item_id: str) -> str:
    return f"tally:{shared_item_id}"


def predict_vote(tally: VoteTally, vote_type: VoteType) -> VoteTally:
    """
    Recuento que resultará de votar vote_type, con las mismas reglas de toggle
    que el ledger. No modifica el tally recibido.
    """
    like_count = tally.like_count
    dislike_count = tally.dislike_count

    def bump(kind: VoteType, delta: int) -> None:
        nonlocal like_count, dislike_count
        if kind == VoteType.LIKE:
            like_count = max(like_count + delta, 0)
        else:
            dislike_count = max(dislike_count + delta, 0)

    if tally.viewer_vote is None:
        bump(vote_type, 1)
        viewer_vote = vote_type
    elif tally.viewer_vote == vote_type:
        bump(vote_type, -1)
        viewer_vote = None
    else:
        bump(tally.viewer_vote, -1)
        bump(vote_type, 1)
        viewer_vote = vote_type

    return VoteTally(
        shared_item_id=tally.shared_item_id,
        like_count=like_count,
        dislike_count=dislike_count,
        viewer_vote=viewer_vote,
    )
