"""
Form renderer — projects the calculator schema and a session's selections
into a FormView of controls, and applies user events back onto the state.

The view holds no pricing logic of its own; totals come from pricing.
"""

from typing import Union

from .pricing import format_money, parse_amount
from .schemas import (
    CalculatorSchema,
    Control,
    ControlOption,
    FieldVariant,
    FormView,
    SchemaNotFound,
)
from .selection import SelectionState

PLACEHOLDER_TEXT = "Select…"
FOOTER_NOTE = "Live running total updates as you select."


class UnknownControlError(Exception):
    """An event addressed a field or option the calculator does not declare."""


def render_form(schema: Union[CalculatorSchema, SchemaNotFound], state: SelectionState) -> FormView:
    """Build the full form view for the current state."""
    if isinstance(schema, SchemaNotFound):
        return FormView(
            name="No calculator found",
            available=False,
            message=f"Make sure the calculator file exists and is valid JSON. ({schema.reason})",
        )

    total = state.total(schema)
    controls = []
    for field in schema.fields:
        if field.variant == FieldVariant.DIVIDER:
            controls.append(Control(field_id=field.id, kind="divider"))
        elif not field.is_interactive:
            # No options to choose from: label and description only
            controls.append(Control(
                field_id=field.id,
                kind="static",
                key=field.key,
                label=field.label,
                description=field.description or None,
            ))
        elif field.variant == FieldVariant.DROPDOWN:
            controls.append(_render_dropdown(field, state))
        elif field.is_choice_group:
            controls.append(_render_choice_group(field, state))

    return FormView(
        name=schema.name,
        total=total,
        total_display=format_money(total),
        controls=controls,
        footer_note=FOOTER_NOTE,
    )


def _render_dropdown(field, state: SelectionState) -> Control:
    options = [ControlOption(value="", text="", display=PLACEHOLDER_TEXT)]
    for option in field.options:
        options.append(ControlOption(
            value=option.option_value or "",
            text=option.option_text,
            display=f"{option.option_text} ({format_money(parse_amount(option.option_value))})",
            hint=option.option_hint,
        ))
    return Control(
        field_id=field.id,
        kind="select",
        key=field.key,
        label=field.label,
        description=field.description or None,
        options=options,
        selected=state.raw_values.get(field.key, ""),
    )


def _render_choice_group(field, state: SelectionState) -> Control:
    options = [
        ControlOption(
            value=option.option_value or "",
            text=option.option_text,
            display=f"{option.option_text} — {format_money(parse_amount(option.option_value))}",
            hint=option.option_hint,
            checked=state.is_checked(field.key, option.option_text),
        )
        for option in field.options
    ]
    return Control(
        field_id=field.id,
        kind="checkbox_group",
        key=field.key,
        label=field.label,
        description=field.description or None,
        options=options,
    )


# --- Events ---

def _find_field(schema: CalculatorSchema, field_id: int, variants):
    field = schema.field_by_id(field_id)
    if field is None:
        raise UnknownControlError(f"No field with id {field_id}")
    if field.variant not in variants:
        raise UnknownControlError(
            f"Field {field_id} is a {field.variant.value} field, not {' / '.join(v.value for v in variants)}"
        )
    if not field.is_interactive:
        raise UnknownControlError(f"Field {field_id} has no options")
    return field


def handle_select(schema: CalculatorSchema, state: SelectionState, field_id: int, raw_value: str) -> None:
    """
    Apply a dropdown change. The first option whose value matches the raw
    value wins; no match (the placeholder) stores 0 with an empty label.
    """
    field = _find_field(schema, field_id, (FieldVariant.DROPDOWN,))
    raw_value = raw_value or ""
    match = None
    if raw_value:
        match = next(
            (o for o in field.options if (o.option_value or "") == raw_value),
            None,
        )

    if match is None:
        state.select(field.key, 0.0, "", "")
    else:
        state.select(field.key, parse_amount(match.option_value), match.option_text, raw_value)


def handle_toggle(schema: CalculatorSchema, state: SelectionState, field_id: int,
                  option_text: str, checked: bool) -> None:
    """Set or clear one option of a Toggle/Checkbox field."""
    field = _find_field(schema, field_id, (FieldVariant.TOGGLE, FieldVariant.CHECKBOX))
    if not any(o.option_text == option_text for o in field.options):
        raise UnknownControlError(f"Field {field_id} has no option '{option_text}'")
    state.set_flag(field.key, option_text, checked)
