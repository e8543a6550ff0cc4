"""
HTTP error factories for the POS API.

Services raise plain ValueError / LookupError; routes translate them here.
Internal details are logged, never returned to the register screen.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class TransactionTimeError(ValueError):
    """A sale or return is dated before the last recorded transaction."""


class BusinessError:
    """Factories for the HTTP errors the routes raise."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        """
        404 with a generic body.

        Example:
            if not sale:
                raise BusinessError.not_found("Sale", f"id={sale_id}")
        """
        if reason:
            logger.info(f"{resource} not found: {reason}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def unauthorized(reason: str = "") -> HTTPException:
        """Same 401 for a wrong password and an unknown username."""
        logger.warning(f"Unauthorized access attempt: {reason}")
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @staticmethod
    def forbidden(reason: str = "") -> HTTPException:
        logger.warning(f"Forbidden access: {reason}")
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for validation and business rule errors.

        The cashier caused these, so the message is returned as-is:
        "Cart is empty", "A shift is already open", back-dated transactions.
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def conflict(detail: str) -> HTTPException:
        """409, e.g. "Customer code already exists"."""
        logger.info(f"Conflict: {detail}")
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )

