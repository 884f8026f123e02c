from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
UNIT = Decimal("1")


def to_decimal(value, field=None) -> Decimal:
    """Coerce request/ORM values to Decimal; blank means zero."""
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, bool):
        raise ValidationError({field or "amount": "Expected a number."})
    try:
        # str() first so floats like 0.1 don't drag binary noise along
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({field or "amount": f"'{value}' is not a valid number."})


def money(value) -> Decimal:
    # cent precision, half away from zero for positives (like Math.round)
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def whole_units(value) -> Decimal:
    return to_decimal(value).quantize(UNIT, rounding=ROUND_HALF_UP)
