from __future__ import annotations

from .documents import (
    format_auto,
    format_individual,
    format_organization,
    infer_kind,
    parse_document,
    strip_non_digits,
    validate,
    validate_individual,
    validate_organization,
)

__all__ = [
    "format_auto",
    "format_individual",
    "format_organization",
    "infer_kind",
    "parse_document",
    "strip_non_digits",
    "validate",
    "validate_individual",
    "validate_organization",
]
