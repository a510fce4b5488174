# foodorder/api/errors.py
from fastapi import HTTPException

from foodorder.domain.errors import (
    CancelWindowExpired,
    ConcurrencyConflict,
    CrossRestaurantConflict,
    FoodOrderError,
    InvalidTransition,
    NotAuthorized,
    NotFound,
    PersistenceError,
    PromotionRejected,
    ValidationError,
)

STATUS_CODES = (
    (NotFound, 404),
    (NotAuthorized, 403),
    (CrossRestaurantConflict, 409),
    (InvalidTransition, 409),
    (CancelWindowExpired, 409),
    (ConcurrencyConflict, 409),
    (PromotionRejected, 422),
    (ValidationError, 422),
    (PersistenceError, 503),
)


def to_http(error: FoodOrderError) -> HTTPException:
    status = next((code for cls, code in STATUS_CODES if isinstance(error, cls)), 400)
    return HTTPException(
        status_code=status,
        detail={**error.details, "code": error.code, "message": error.message},
    )
