"""Resource quantities in the Kubernetes notation, such as ``5Gi`` or ``500m``."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import ROUND_UP, Decimal, InvalidOperation
from enum import Enum


class QuantityFormat(str, Enum):
    """How the suffix of a quantity was written."""

    BINARY_SI = "BinarySI"
    DECIMAL_SI = "DecimalSI"
    DECIMAL_EXPONENT = "DecimalExponent"


_BINARY_SUFFIXES = {"Ki": 1, "Mi": 2, "Gi": 3, "Ti": 4, "Pi": 5, "Ei": 6}
_DECIMAL_SUFFIXES = {
    "n": -9,
    "u": -6,
    "m": -3,
    "": 0,
    "k": 3,
    "M": 6,
    "G": 9,
    "T": 12,
    "P": 15,
    "E": 18,
}

_NUMBER = re.compile(r"([+-]?(?:\d+(?:\.\d*)?|\.\d+))(.*)", re.DOTALL)
_EXPONENT = re.compile(r"[eE]([+-]?\d+)")

_FORMAT_MESSAGE = (
    "quantities must match the regular expression "
    "'^([+-]?[0-9.]+)([eEinumkKMGTP]*[-+]?[0-9]*)$'"
)
_SUFFIX_MESSAGE = "unable to parse quantity's suffix"


@dataclass(frozen=True)
class Quantity:
    """An exact amount with the suffix format it was written in."""

    value: Decimal
    format: QuantityFormat
    text: str = field(default="", compare=False)

    def __str__(self) -> str:
        return self.text or format(self.value.normalize(), "f")

    def __int__(self) -> int:
        """The amount rounded away from zero to a whole number."""
        return int(self.value.to_integral_value(rounding=ROUND_UP))


def parse_quantity(text: str) -> Quantity:
    """Parse a quantity string; raise ValueError if it is malformed."""
    if not text:
        raise ValueError(_FORMAT_MESSAGE)
    match = _NUMBER.fullmatch(text)
    if match is None:
        raise ValueError(_FORMAT_MESSAGE)
    number_text, suffix = match.groups()
    try:
        number = Decimal(number_text)
    except InvalidOperation as exc:
        raise ValueError(_FORMAT_MESSAGE) from exc

    if suffix in _BINARY_SUFFIXES:
        value = number * (Decimal(1024) ** _BINARY_SUFFIXES[suffix])
        return Quantity(value, QuantityFormat.BINARY_SI, text)
    if suffix in _DECIMAL_SUFFIXES:
        value = number.scaleb(_DECIMAL_SUFFIXES[suffix])
        return Quantity(value, QuantityFormat.DECIMAL_SI, text)
    exponent = _EXPONENT.fullmatch(suffix)
    if exponent is not None:
        value = number.scaleb(int(exponent.group(1)))
        return Quantity(value, QuantityFormat.DECIMAL_EXPONENT, text)
    raise ValueError(_SUFFIX_MESSAGE)