# foodorder/utils/money.py
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

Money = Decimal
ZERO = Decimal("0.00")


def D(x) -> Money:
    if isinstance(x, Decimal):
        return x
    if isinstance(x, bool):
        raise InvalidOperation(f"not a money value: {x!r}")
    return Decimal(str(x if x is not None else "0"))


def round_money(x) -> Money:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
