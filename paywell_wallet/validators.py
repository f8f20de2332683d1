"""
Input validation for wallet identifiers.

Wallets are keyed by phone number, so every number is normalized to
E.164 before it is used to build a storage key.
"""

from typing import Any, Mapping, Optional, Union

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat
from pydantic import BaseModel, Field, field_validator

from .domain.exceptions import InvalidPhoneNumberException

DEFAULT_COUNTRY = "TZ"
COUNTRY_PATTERN = r"^[A-Za-z]{2}$"


class PhoneNumberOptions(BaseModel):
    """
    Options for phone number conversion.

    Attributes:
        country: ISO 3166-1 alpha-2 code the number is validated against
    """

    country: str = Field(
        default=DEFAULT_COUNTRY,
        pattern=COUNTRY_PATTERN,
        description="ISO alpha-2 country code, e.g. TZ",
    )

    @field_validator("country")
    @classmethod
    def normalize_country(cls, v: str) -> str:
        return v.upper()


def _resolve_country(
    options: Union[PhoneNumberOptions, Mapping[str, Any], str, None],
    default_country: str,
) -> str:
    if isinstance(options, PhoneNumberOptions):
        return options.country
    if isinstance(options, str):
        options = {"country": options}
    elif options is not None and not isinstance(options, Mapping):
        raise ValueError(f"Unsupported phone number options: {options!r}")

    merged = {"country": default_country}
    if options:
        merged.update({k: v for k, v in options.items() if v is not None})
    return PhoneNumberOptions(**merged).country


def to_e164(
    phone_number: Any,
    options: Union[PhoneNumberOptions, Mapping[str, Any], str, None] = None,
    *,
    default_country: str = DEFAULT_COUNTRY,
) -> str:
    """
    Convert a phone number to E.164 format.

    The number must be valid for the requested country. Numbers already in
    E.164 form are returned unchanged.

    Args:
        phone_number: Phone number in any common notation
        options: Conversion options, e.g. ``{"country": "TZ"}``, or a bare
            country code
        default_country: Country used when options name none

    Returns:
        Phone number in E.164 format, e.g. ``+255714123456``

    Raises:
        InvalidPhoneNumberException: If the number cannot be parsed or is not
            valid for the country
    """
    try:
        country = _resolve_country(options, default_country)
    except ValueError as e:
        raise InvalidPhoneNumberException(phone_number) from e

    if phone_number is None or not str(phone_number).strip():
        raise InvalidPhoneNumberException(phone_number, country)

    try:
        parsed = phonenumbers.parse(str(phone_number), country)
    except NumberParseException as e:
        raise InvalidPhoneNumberException(phone_number, country) from e

    if not phonenumbers.is_valid_number_for_region(parsed, country):
        raise InvalidPhoneNumberException(phone_number, country)

    return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)


def is_valid_phone_number(phone_number: Any, country: Optional[str] = None) -> bool:
    """
    Check whether a phone number is valid for a country.

    Args:
        phone_number: Phone number to validate
        country: ISO alpha-2 country code (defaults to TZ)

    Returns:
        True if the number converts to E.164, False otherwise
    """
    try:
        to_e164(phone_number, {"country": country or DEFAULT_COUNTRY})
    except InvalidPhoneNumberException:
        return False
    return True
