from typing import Dict

from fastapi import HTTPException, status

from app.core.outcomes import Outcome, OperationResult

OUTCOME_STATUS_CODES: Dict[Outcome, int] = {
    Outcome.ALREADY_PENDING: status.HTTP_409_CONFLICT,
    Outcome.ALREADY_FOLLOWING: status.HTTP_409_CONFLICT,
    Outcome.ALREADY_RESOLVED: status.HTTP_409_CONFLICT,
    Outcome.ALREADY_SHARED: status.HTTP_409_CONFLICT,
    Outcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    Outcome.NOT_OWNER: status.HTTP_403_FORBIDDEN,
    Outcome.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    Outcome.INVALID: status.HTTP_400_BAD_REQUEST,
}


def raise_for_outcome(result: OperationResult) -> None:
    """Convierte un resultado no OK en HTTPException con el outcome en el detalle."""
    if result.ok:
        return
    raise HTTPException(
        status_code=OUTCOME_STATUS_CODES.get(result.outcome, status.HTTP_400_BAD_REQUEST),
        detail={"outcome": result.outcome.value, "message": result.detail},
    )
