from __future__ import annotations


class ConversionError(ValueError):
    kind = "ConversionError"


class MalformedRecord(ConversionError):
    kind = "MalformedRecord"


class UnsupportedVariant(ConversionError):
    kind = "UnsupportedVariant"


class InconsistentAction(ConversionError):
    kind = "InconsistentAction"


class InvalidSeatCount(ConversionError):
    kind = "InvalidSeatCount"


class UnrenderableAmount(ConversionError):
    kind = "UnrenderableAmount"


__all__ = [
    "ConversionError",
    "InconsistentAction",
    "InvalidSeatCount",
    "MalformedRecord",
    "UnrenderableAmount",
    "UnsupportedVariant",
]
