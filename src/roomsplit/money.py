"""Money arithmetic for balance and settlement computations.

Every amount inside the engine is a ``Decimal``. Values are parsed once at the
ledger boundary with :func:`parse_amount` and rounded to cents only when they
leave the engine (API responses, CLI output) with :func:`to_display`.
"""

import logging
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidAmountError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")


def parse_amount(
    value: object, field: str = "amount", record_id: str | None = None
) -> Decimal:
    """
    Parse a raw paid/owed amount into a Decimal.

    Missing values are rejected rather than treated as zero. Floats go through
    ``str()`` so their shortest repr is used instead of the binary expansion.

    Args:
        value: Raw value from storage or an API payload
        field: Name of the field being parsed (used in the error)
        record_id: Identifier of the record holding the value

    Returns:
        The amount as a non-negative Decimal

    Raises:
        InvalidAmountError: If the value is missing, non-numeric, non-finite
                            or negative
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(value, field=field, record_id=record_id)

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int | float | str):
        text = str(value).strip()
        if not text:
            raise InvalidAmountError(value, field=field, record_id=record_id)
        try:
            amount = Decimal(text)
        except InvalidOperation as e:
            raise InvalidAmountError(value, field=field, record_id=record_id) from e
    else:
        raise InvalidAmountError(value, field=field, record_id=record_id)

    if not amount.is_finite() or amount < 0:
        raise InvalidAmountError(value, field=field, record_id=record_id)

    exponent = amount.as_tuple().exponent
    if isinstance(exponent, int) and exponent < -2:
        logger.debug(f"{field} on {record_id} has unusual precision: {amount}")

    return amount


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    """Sum amounts exactly, starting from a Decimal zero."""
    return sum(amounts, ZERO)


def to_display(amount: Decimal) -> Decimal:
    """
    Round an amount to cents for presentation.

    Uses ROUND_HALF_UP for consistency. Never call this on intermediate
    values; rounding happens once, on the way out.
    """
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def average(total: Decimal, count: int) -> Decimal:
    """
    Average an amount over ``count`` people, rounded for display.

    Returns zero when there is nobody to divide by.
    """
    if count <= 0:
        return to_display(ZERO)
    return to_display(total / count)
