"""Producer validation rules: CPF/CNPJ check digits and the area invariant.

Tax identifiers are accepted formatted or bare. Every non-digit character is
stripped before checking, so ``"529.982.247-25"`` and ``"52998224725"`` are
the same CPF.

Both formats end in two check digits. Each one is computed from the digits
before it as ``11 - (weighted_sum % 11)``, where a remainder of 0 or 1 gives
check digit 0.
"""

import re

from src.core.exceptions import ErrorCode, ValidationError

CPF_LENGTH = 11
CNPJ_LENGTH = 14
CHECK_DIGITS = 2

INVALID_TAX_ID_MESSAGE = "Invalid CPF or CNPJ"
INVALID_AREA_MESSAGE = "Invalid total area"

# Pass the checksum but are not issued
CPF_BLOCKLIST = frozenset({"12345678909"})

_NON_DIGITS = re.compile(r"\D")


def only_digits(value: str) -> str:
    """Strip every non-digit character from ``value``."""
    return _NON_DIGITS.sub("", value)


def _is_repeated_digit(digits: str) -> bool:
    return len(set(digits)) == 1


def _check_digit(weighted_sum: int) -> int:
    remainder = weighted_sum % 11
    return 0 if remainder < 2 else 11 - remainder


def _cpf_check_digit(digits: str) -> int:
    # Weights run from len+1 down to 2
    weight = len(digits) + 1
    return _check_digit(
        sum(int(digit) * (weight - index) for index, digit in enumerate(digits))
    )


def _cnpj_check_digit(digits: str) -> int:
    # Weights cycle 2..9 starting from the rightmost digit
    return _check_digit(
        sum(
            int(digit) * (2 + index % 8)
            for index, digit in enumerate(reversed(digits))
        )
    )


def is_valid_cpf(value: str) -> bool:
    """Check whether ``value`` is a valid CPF (individual taxpayer number).

    Args:
        value: CPF, with or without punctuation.

    Returns:
        bool: True when the value has 11 digits and both check digits match.
    """
    if not isinstance(value, str):
        return False

    digits = only_digits(value)
    if len(digits) != CPF_LENGTH:
        return False
    if _is_repeated_digit(digits) or digits in CPF_BLOCKLIST:
        return False

    body = digits[:-CHECK_DIGITS]
    first = _cpf_check_digit(body)
    second = _cpf_check_digit(body + str(first))
    return digits[-CHECK_DIGITS:] == f"{first}{second}"


def is_valid_cnpj(value: str) -> bool:
    """Check whether ``value`` is a valid CNPJ (company registry number).

    Args:
        value: CNPJ, with or without punctuation.

    Returns:
        bool: True when the value has 14 digits and both check digits match.
    """
    if not isinstance(value, str):
        return False

    digits = only_digits(value)
    if len(digits) != CNPJ_LENGTH:
        return False
    if _is_repeated_digit(digits):
        return False

    body = digits[:-CHECK_DIGITS]
    first = _cnpj_check_digit(body)
    second = _cnpj_check_digit(body + str(first))
    return digits[-CHECK_DIGITS:] == f"{first}{second}"


def is_valid_tax_id(value: str) -> bool:
    """Whether ``value`` is a valid CPF or a valid CNPJ. Never raises."""
    return is_valid_cpf(value) or is_valid_cnpj(value)


def validate_tax_id(value: str) -> None:
    """Raise :class:`ValidationError` unless ``value`` is a CPF or CNPJ."""
    if not is_valid_tax_id(value):
        raise ValidationError(
            INVALID_TAX_ID_MESSAGE,
            error_code=ErrorCode.INVALID_TAX_ID,
        )


def validate_area(
    total_area: float, agricultural_area: float, vegetation_area: float
) -> None:
    """Enforce ``agricultural_area + vegetation_area <= total_area``.

    Raises:
        ValidationError: When the farm's used area exceeds its total area.
    """
    if agricultural_area + vegetation_area > total_area:
        raise ValidationError(
            INVALID_AREA_MESSAGE,
            error_code=ErrorCode.INVALID_AREA,
            context={
                "total_area": total_area,
                "agricultural_area": agricultural_area,
                "vegetation_area": vegetation_area,
            },
        )
