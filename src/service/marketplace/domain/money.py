from decimal import ROUND_HALF_UP, Decimal
from typing import Union


CENT = Decimal('0.01')

Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    """Quantize to cents; floats go through str to avoid binary artefacts."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Number) -> int:
    return int(to_money(value) * 100)


def split_platform_fee(amount: Number, fee_percentage: Number) -> tuple[Decimal, Decimal]:
    """Return (platform_fee, seller_amount) for a gross amount."""
    gross = to_money(amount)
    fee = to_money(gross * Decimal(str(fee_percentage)))
    return fee, gross - fee
