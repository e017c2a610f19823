"""
Price resolution - human prices to atomic token amounts
"""

import re
from decimal import ROUND_DOWN, Decimal, InvalidOperation

from x402.exceptions import InvalidPriceError
from x402.tokens.registry import TokenRegistry
from x402.types import AtomicAmount, Money, Price, TokenAmount

MIN_PRICE = Decimal("0.0001")
MAX_PRICE = Decimal("999999999")

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def parse_money(value: Money) -> Decimal:
    """Parse a money-like value ("$0.01", "0.01", 0.01) into a Decimal.

    Raises:
        InvalidPriceError: If the value is malformed or outside [0.0001, 999999999]
    """
    if isinstance(value, bool):
        raise InvalidPriceError(f"Invalid price: {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value)
        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            raise InvalidPriceError(f"Invalid price: {value!r}") from None
    else:
        raise InvalidPriceError(f"Invalid price: {value!r}")

    if not amount.is_finite():
        raise InvalidPriceError(f"Invalid price: {value!r}")
    if amount < MIN_PRICE or amount > MAX_PRICE:
        raise InvalidPriceError(f"Price {amount} must be between {MIN_PRICE} and {MAX_PRICE}")
    return amount


def process_price_to_atomic_amount(price: Price, network: str) -> AtomicAmount:
    """Convert a price into atomic units of the asset it is paid in.

    Money-like prices are denominated in the network's default stablecoin and
    truncated to an integer; explicit token amounts pass through unchanged.

    Raises:
        InvalidPriceError: Malformed money value
        UnsupportedNetworkError: No default asset registered for *network*
    """
    if isinstance(price, TokenAmount):
        return AtomicAmount(max_amount_required=price.amount, asset=price.asset)

    amount = parse_money(price)
    token = TokenRegistry.get_default_asset(network)
    atomic = (amount * (Decimal(10) ** token.decimals)).to_integral_value(rounding=ROUND_DOWN)
    return AtomicAmount(max_amount_required=str(int(atomic)), asset=token.to_asset())
