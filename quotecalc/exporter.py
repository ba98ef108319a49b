"""
Quote exporter — turns a session's selections into line items and a saved
PDF quote.

Line items follow schema field order:
- Dropdowns: one item for the chosen option, only when its amount is non-zero
  and it has a label (a $0 choice looks the same as no choice).
- Toggle/Checkbox fields: one item per checked option, in declared order.
"""

import logging
import re
from datetime import datetime
from pathlib import Path

from .pdf_generator import FpdfWriter, layout_quote
from .pricing import parse_amount
from .schemas import FieldVariant, LineItem

logger = logging.getLogger(__name__)

EMPTY_EXPORT_MESSAGE = "Please make a selection first."


class EmptyExportError(Exception):
    """Export attempted with nothing worth quoting."""

    def __init__(self, message: str = EMPTY_EXPORT_MESSAGE):
        super().__init__(message)
        self.message = message


def build_line_items(schema, chosen_values: dict, labels: dict, chosen_flags: dict) -> list[LineItem]:
    items = []
    for field in schema.fields:
        if field.variant == FieldVariant.DROPDOWN:
            amount = chosen_values.get(field.key, 0.0) or 0.0
            label = labels.get(field.key, "")
            if amount != 0 and label:
                items.append(LineItem(section=field.label, item=label, price=amount))
        elif field.is_choice_group:
            for option in field.options:
                if chosen_flags.get((field.key, option.option_text)):
                    items.append(LineItem(
                        section=field.label,
                        item=option.option_text,
                        price=parse_amount(option.option_value),
                    ))
    return items


def check_exportable(line_items: list, chosen_values: dict) -> None:
    """Raise EmptyExportError when there are no items and no positive dropdown choice."""
    if not line_items and not any(amount > 0 for amount in chosen_values.values()):
        raise EmptyExportError()


def quote_filename(prefix: str, timestamp: datetime) -> str:
    """
    e.g. quote_filename("Acme", datetime(2026, 10, 19, 14, 5, 9))
         -> "Acme_Quote_2026-10-19-14-05-09.000.pdf"
    """
    stamp = timestamp.isoformat(timespec="milliseconds")
    return f"{prefix}_Quote_{stamp.replace(':', '-').replace('T', '-')}.pdf"


def _safe_prefix(text: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "_", text or "").strip("_") or "Calculator"


def export_quote(schema, state, export_dir, prefix: str = "", company_name: str = "",
                 closing_note: str = "", now: datetime = None, writer=None) -> Path:
    """
    Build, guard and save a quote for one session.

    Args:
        schema: CalculatorSchema
        state: SelectionState of the session
        export_dir: directory the PDF is written to (created if missing)
        prefix: filename prefix; the calculator name is used when blank
        now: export timestamp (defaults to the current local time)
        writer: DocumentWriter (defaults to an fpdf2 writer)

    Returns:
        Path of the saved PDF

    Raises:
        EmptyExportError: nothing selected; no file is written
    """
    line_items = build_line_items(schema, state.chosen_values, state.labels, state.chosen_flags)
    try:
        check_exportable(line_items, state.chosen_values)
    except EmptyExportError:
        logger.info("Export rejected for '%s': no selections", schema.name)
        raise

    now = now or datetime.now()
    writer = writer or FpdfWriter()
    pages = layout_quote(
        writer,
        title=schema.name,
        line_items=line_items,
        total=state.total(schema),
        generated_at=now,
        company_name=company_name,
        closing_note=closing_note,
    )

    out_dir = Path(export_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / quote_filename(_safe_prefix(prefix or schema.name), now)
    writer.save(path)
    logger.info("Saved quote %s (%d items, %d pages)", path, len(line_items), pages)
    return path
