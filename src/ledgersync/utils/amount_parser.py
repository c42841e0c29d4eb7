"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> int:
    """Parse an amount string into an integer in minor currency units.

    Handles various formats:
    - "1234"
    - "¥1,234"
    - "-1234"
    - "-$1,234"
    - "(1234)" (negative in parentheses)
    - "1234.00" (a zero fraction is accepted)

    Args:
        amount_str: Amount string

    Returns:
        Signed integer amount

    Raises:
        ValueError: If amount string cannot be parsed or has a non-zero fraction
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and yen suffix
    amount_str = re.sub(r"[$€£¥円]", "", amount_str)

    # Remove commas
    amount_str = amount_str.replace(",", "")

    # Remove whitespace again
    amount_str = amount_str.strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

    if not amount.is_finite() or amount != amount.to_integral_value():
        raise ValueError(f"Amount '{amount_str}' is not a whole number of minor units")

    value = int(amount)
    return -value if is_negative else value
