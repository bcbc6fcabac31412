from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
THOUSANDTH = Decimal("0.001")

# Differences below one cent are rounding noise, not drift.
MONEY_TOLERANCE = Decimal("0.01")


def to_money(amount) -> Decimal:
    if amount is None:
        return Decimal("0.00")
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_quantity(quantity) -> Decimal:
    if quantity is None:
        return Decimal("0.000")
    return Decimal(str(quantity)).quantize(THOUSANDTH, rounding=ROUND_HALF_UP)


def format_currency(amount, currency: str = "USD") -> str:
    amount = to_money(amount)
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency} {abs(amount):,.2f}"
