"""
HTTP error factory for the billing API.

Billing refusals (empty cart, missing prescriber details) are values returned
by the engine. This module turns them, and the usual lookup/input failures,
into safe HTTP responses. Detailed context goes to the log, not the client.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class BusinessError:
    """Business-domain exceptions with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        """
        404 for a missing product, customer, session or invoice.

        Example:
            if not product:
                raise BusinessError.not_found("Product", f"id={product_id}")
        """
        if reason:
            logger.warning(f"Not found: {resource} - {reason}")

        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation / business logic errors.

        OK to include specific details here since the cashier caused the issue.
        Examples: "Cart is empty", "Unsupported spreadsheet format"
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def compliance_required(detail: str) -> HTTPException:
        """
        428 when a Schedule H1 sale is missing doctor/patient details.

        The client is expected to collect the record and retry the same checkout.
        """
        logger.info(f"Compliance required: {detail}")
        return HTTPException(
            status_code=status.HTTP_428_PRECONDITION_REQUIRED,
            detail={"kind": "ComplianceRequired", "message": detail},
        )

    @staticmethod
    def too_many_sessions(limit: int) -> HTTPException:
        """503 when every billing counter slot holds a bill in progress."""
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"All {limit} billing counters are busy. Finish or reset a bill and retry.",
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500 - logs actual error internally, hides from user.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=True
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )
