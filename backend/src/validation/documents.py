"""CPF/CNPJ helpers.

Two tiers live here. ``infer_kind`` and ``format_auto`` follow the input while
it is being typed and never reject anything. ``validate`` is the only
authoritative check: exact length plus both check digits.
"""
from __future__ import annotations

import re

from ..domain import DocumentKind, DocumentNumber, ValidationResult

CPF_LENGTH = 11
CNPJ_LENGTH = 14

CPF_WEIGHTS_1 = list(range(10, 1, -1))
CPF_WEIGHTS_2 = list(range(11, 1, -1))
CNPJ_WEIGHTS_1 = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
CNPJ_WEIGHTS_2 = [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]

NON_DIGIT_PATTERN = re.compile(r"[^0-9]")


def strip_non_digits(value: str | None) -> str:
    return NON_DIGIT_PATTERN.sub("", value or "")


def _apply_mask(digits: str, groups: list[int], separators: list[str]) -> str:
    # The last group takes any overflow so no typed digit is lost.
    parts: list[str] = []
    start = 0
    for index, size in enumerate(groups):
        end = len(digits) if index == len(groups) - 1 else start + size
        chunk = digits[start:end]
        if not chunk:
            break
        if index:
            parts.append(separators[index - 1])
        parts.append(chunk)
        start = end
    return "".join(parts)


def format_individual(value: str | None) -> str:
    """Progressive ``000.000.000-00`` mask over however many digits are present."""
    return _apply_mask(strip_non_digits(value), [3, 3, 3, 2], [".", ".", "-"])


def format_organization(value: str | None) -> str:
    """Progressive ``00.000.000/0000-00`` mask over however many digits are present."""
    return _apply_mask(strip_non_digits(value), [2, 3, 3, 4, 2], [".", ".", "/", "-"])


def format_auto(value: str | None) -> str:
    if len(strip_non_digits(value)) <= CPF_LENGTH:
        return format_individual(value)
    return format_organization(value)


def infer_kind(value: str | None) -> DocumentKind:
    length = len(strip_non_digits(value))
    if length == CPF_LENGTH:
        return DocumentKind.INDIVIDUAL
    if length == CNPJ_LENGTH:
        return DocumentKind.ORGANIZATION
    if CPF_LENGTH < length < CNPJ_LENGTH:
        return DocumentKind.ORGANIZATION
    if 0 < length < CPF_LENGTH:
        return DocumentKind.INDIVIDUAL
    return DocumentKind.UNKNOWN


def _check_digit(digits: str, weights: list[int]) -> int:
    total = sum(int(digit) * weight for digit, weight in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def _is_repeated(digits: str) -> bool:
    return digits == digits[0] * len(digits)


def validate_individual(value: str | None) -> bool:
    digits = strip_non_digits(value)
    if len(digits) != CPF_LENGTH or _is_repeated(digits):
        return False

    if _check_digit(digits[:9], CPF_WEIGHTS_1) != int(digits[9]):
        return False
    return _check_digit(digits[:10], CPF_WEIGHTS_2) == int(digits[10])


def validate_organization(value: str | None) -> bool:
    digits = strip_non_digits(value)
    if len(digits) != CNPJ_LENGTH or _is_repeated(digits):
        return False

    if _check_digit(digits[:12], CNPJ_WEIGHTS_1) != int(digits[12]):
        return False
    return _check_digit(digits[:13], CNPJ_WEIGHTS_2) == int(digits[13])


def validate(value: str | None) -> ValidationResult:
    length = len(strip_non_digits(value))
    if length == CPF_LENGTH:
        return ValidationResult(is_valid=validate_individual(value), kind=DocumentKind.INDIVIDUAL)
    if length == CNPJ_LENGTH:
        return ValidationResult(is_valid=validate_organization(value), kind=DocumentKind.ORGANIZATION)
    return ValidationResult(is_valid=False, kind=None)


def parse_document(value: str | None) -> DocumentNumber:
    """Build the display value for one keystroke or submit.

    Digits past the CNPJ length are cut, as the masked input field does.
    ``kind`` is exact-length only; ``inferred_kind`` is the typing hint.
    """
    raw = value or ""
    digits = strip_non_digits(raw)[:CNPJ_LENGTH]
    result = validate(digits)
    if result.kind is DocumentKind.INDIVIDUAL:
        formatted = format_individual(digits)
    elif result.kind is DocumentKind.ORGANIZATION:
        formatted = format_organization(digits)
    else:
        formatted = digits
    return DocumentNumber(
        raw=raw,
        digits=digits,
        kind=result.kind or DocumentKind.UNKNOWN,
        inferred_kind=infer_kind(digits),
        formatted=formatted,
        is_valid=result.is_valid,
    )
