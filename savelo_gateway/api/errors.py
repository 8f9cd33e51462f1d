"""Translate domain errors into user-facing HTTP errors"""

import logging
from fastapi import HTTPException

from savelo_gateway.domain.exceptions import (
    DomainException,
    MutationInFlightError,
    NetworkError,
    NotActiveError,
    OwnershipMismatchError,
    RejectedError,
    ValidationError,
)


def to_http_error(error: DomainException, request_id: str) -> HTTPException:
    """Map the error taxonomy onto status codes; nothing here is fatal"""
    if isinstance(error, ValidationError):
        logging.info(f"Validation failed: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=422, detail=str(error))

    if isinstance(error, OwnershipMismatchError):
        # Foreign plans are reported as unknown
        logging.warning(str(error), extra={"request_id": request_id})
        return HTTPException(status_code=404, detail="Plan not found")

    if isinstance(error, RejectedError):
        return HTTPException(status_code=409, detail="Transaction was declined in your wallet. Please try again.")

    if isinstance(error, NotActiveError):
        logging.error(f"Payment on non-payable plan: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=409, detail=str(error))

    if isinstance(error, MutationInFlightError):
        return HTTPException(status_code=429, detail="A previous transaction is still being confirmed")

    if isinstance(error, NetworkError):
        logging.error(f"Ledger error: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=503, detail="Ledger service unavailable")

    logging.error(f"Unexpected domain error: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")
