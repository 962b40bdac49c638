"""Domain Types: identifier type and the parsing rules for it.

Invariants:
    - ProductId is a signed 64-bit integer assigned by the store
    - parse_product_id accepts only an optional sign followed by ASCII digits
    - Anything outside the 64-bit range is a client error, not a store error,
      including digit strings too long for int() to convert
"""

import re
from typing import NewType

from catalog.core.errors import ClientInputError, ErrorContext


ProductId = NewType("ProductId", int)

PRODUCT_ID_MIN = -(2**63)
PRODUCT_ID_MAX = 2**63 - 1

_NUMERIC_ID = re.compile(r"([+-]?)0*([0-9]+)")
_MAX_DIGITS = len(str(PRODUCT_ID_MAX))


def parse_product_id(raw: str) -> ProductId:
    """Parse a path segment into a ProductId or raise ClientInputError."""
    match = _NUMERIC_ID.fullmatch(raw)
    if match is None:
        raise ClientInputError(
            f"Product id must be numeric, got '{raw}'",
            field="id",
            context=ErrorContext(resource="Product"),
        )
    sign, digits = match.groups()
    # bounded before int() so huge digit strings never reach the conversion limit
    value = int(sign + digits) if len(digits) <= _MAX_DIGITS else None
    if value is None or not PRODUCT_ID_MIN <= value <= PRODUCT_ID_MAX:
        raise ClientInputError(
            f"Product id out of range: {raw[:40]}",
            field="id",
            context=ErrorContext(resource="Product"),
        )
    return ProductId(value)
