"""
Total computation — pure math over the schema and the current selections.

Dropdowns contribute their single chosen amount; Toggle/Checkbox fields
contribute every flagged option. Nothing is cached: the total is recomputed
from scratch after every event.
"""

import math


def parse_amount(value) -> float:
    """
    Parse a configured option value into an amount.

    Unparsable, empty or missing values are 0. Negative values are kept
    (discount options reduce the total).
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if text.startswith("-$"):
            text = "-" + text[2:]
        elif text.startswith("$"):
            text = text[1:]
        try:
            amount = float(text)
        except ValueError:
            return 0.0
    if not math.isfinite(amount):
        return 0.0
    return amount


def compute_total(schema, chosen_values: dict, chosen_flags: dict) -> float:
    """
    Sum of every chosen dropdown amount plus every flagged option amount.

    Args:
        schema: CalculatorSchema
        chosen_values: {alias: amount}, one entry per dropdown
        chosen_flags: {(alias, option_text): bool}

    Returns:
        Total rounded to cents
    """
    total = sum(amount or 0.0 for amount in chosen_values.values())

    for field in schema.fields:
        if not field.is_choice_group:
            continue
        for option in field.options:
            if chosen_flags.get((field.key, option.option_text)):
                total += parse_amount(option.option_value)

    return round(total, 2)


def format_money(amount) -> str:
    """Format a number as $X,XXX.XX"""
    try:
        amount = round(float(amount), 2) + 0.0  # no "-$0.00"
    except (ValueError, TypeError):
        return "$0.00"
    if amount < 0:
        return f"-${abs(amount):,.2f}"
    return f"${amount:,.2f}"
