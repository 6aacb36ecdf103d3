"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

_DECIMAL_COMMA = re.compile(r"^-?\d+,\d{1,2}$")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles the formats found on South African statements:
    - "123.45"
    - "R123.45", "ZAR 123.45"
    - "-123.45"
    - "1,234.56", "1 234.56"
    - "123,45" (decimal comma)
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    original = amount_str
    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"^(ZAR|R)\s*", "", amount_str.strip(), flags=re.IGNORECASE)
    amount_str = re.sub(r"\s+", "", amount_str)

    if _DECIMAL_COMMA.match(amount_str):
        amount_str = amount_str.replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{original}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{original}'")
    return -amount if is_negative else amount
