from decimal import ROUND_HALF_UP, Context, Decimal, localcontext
from typing import Any, Iterable, Mapping, Optional

from utils.coercion import ZERO, to_decimal, to_decimal_or_none

CENTS = Decimal("0.01")

# Wide enough for any amount a NUMERIC column can hold, quantized to cents
MONEY_CONTEXT = Context(prec=64, rounding=ROUND_HALF_UP)

INVOICE_NUMBER_PREFIX = "OTT"
INVOICE_NUMBER_OFFSET = 99


# ============================================================
# LINE ITEM AMOUNT
# ============================================================

def resolve_amount(amount: Any, quantity: Any, rate: Any, honor_zero: bool = False) -> Decimal:
    """
    Amount of one line item.

    A supplied amount wins when it parses to a non-zero number, otherwise
    quantity x rate is used (unparseable parts count as zero). An explicit
    amount of 0 is therefore treated as "not supplied" unless honor_zero is set.
    Values too large to represent in cents degrade to zero like any other
    unusable number.
    """
    with localcontext(MONEY_CONTEXT):
        explicit = _to_cents(lambda: to_decimal(amount))
        if explicit != ZERO or (honor_zero and to_decimal_or_none(amount) == ZERO):
            return explicit
        return _to_cents(lambda: to_decimal(quantity) * to_decimal(rate))


def _to_cents(compute) -> Decimal:
    try:
        return compute().quantize(CENTS)
    except ArithmeticError:
        return ZERO.quantize(CENTS)


def resolve_item_amount(item: Mapping[str, Any], honor_zero: bool = False) -> Decimal:
    return resolve_amount(item.get("amount"), item.get("quantity"), item.get("rate"), honor_zero)


# ============================================================
# INVOICE TOTAL
# ============================================================

def calculate_total_due(items: Optional[Iterable[Mapping[str, Any]]], honor_zero: bool = False) -> Decimal:
    total = ZERO.quantize(CENTS)
    with localcontext(MONEY_CONTEXT):
        for item in items or []:
            total += resolve_item_amount(item, honor_zero)
    return total


# ============================================================
# INVOICE NUMBER GENERATOR
# ============================================================

def generate_invoice_number(invoice_id: int, prefix: str = INVOICE_NUMBER_PREFIX,
                            offset: int = INVOICE_NUMBER_OFFSET) -> str:
    return f"{prefix}-{invoice_id + offset}"
