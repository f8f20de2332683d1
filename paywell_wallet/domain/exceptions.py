"""
Custom exceptions for the wallet store domain.

These exceptions represent domain-level errors. Errors raised by the
Redis client are not wrapped and reach the caller as they are.
"""

from typing import Any, Optional


class WalletServiceException(Exception):
    """Base exception for all wallet store errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationException(WalletServiceException):
    """Raised when input validation fails."""

    status_code = 400

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )


class InvalidPhoneNumberException(ValidationException):
    """Raised when a phone number cannot be converted to E.164."""

    def __init__(self, phone_number: Any, country: Optional[str] = None):
        WalletServiceException.__init__(
            self,
            message=f"Invalid Phone Number {phone_number}",
            details={
                "field": "phone_number",
                "value": str(phone_number),
                "country": country,
            },
        )
