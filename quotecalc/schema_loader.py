"""
Calculator schema loader — turns the calculator-builder JSON export into a
CalculatorSchema, or a SchemaNotFound marker when no usable calculator exists.

Only presence checks are made on the document as a whole. Individual fields
that cannot be parsed are skipped so one bad entry never hides the rest of
the form.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from .config import settings
from .schemas import CalculatorField, CalculatorSchema, SchemaNotFound

logger = logging.getLogger(__name__)

LoadResult = Union[CalculatorSchema, SchemaNotFound]


def load_schema(raw) -> LoadResult:
    """
    Parse a calculator document. Never raises.

    Args:
        raw: parsed JSON object, or a JSON string / bytes

    Returns:
        CalculatorSchema for the first calculator in the document, or
        SchemaNotFound with the reason it could not be used.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            return SchemaNotFound(reason=f"Calculator file is not valid JSON: {e}")

    if not isinstance(raw, dict):
        return SchemaNotFound(reason="Calculator file must contain a JSON object")

    calculators = raw.get("calculators")
    if not isinstance(calculators, list) or not calculators:
        return SchemaNotFound(reason="No calculators defined")

    calculator = calculators[0]
    if not isinstance(calculator, dict) or not isinstance(calculator.get("ccb_fields"), list):
        return SchemaNotFound(reason="First calculator has no fields")

    fields = []
    for position, raw_field in enumerate(calculator["ccb_fields"]):
        try:
            fields.append(CalculatorField.model_validate(raw_field))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed calculator field #%d: %s",
                position, e.errors()[0].get("msg", "invalid"),
            )

    name = calculator.get("ccb_name")
    schema = CalculatorSchema(
        name=str(name) if name else "Calculator",
        fields=fields,
    )
    return schema


def load_schema_file(path) -> LoadResult:
    """Read and parse a calculator document from disk."""
    filepath = Path(path)
    try:
        with open(filepath, "rb") as f:
            content = f.read()
    except OSError as e:
        logger.warning("Calculator file %s could not be read: %s", filepath, e)
        return SchemaNotFound(reason=f"Calculator file not found: {filepath.name}")

    result = load_schema(content)
    if isinstance(result, SchemaNotFound):
        logger.warning("No calculator loaded from %s: %s", filepath, result.reason)
    else:
        logger.info(
            "Loaded calculator '%s' with %d fields from %s",
            result.name, len(result.fields), filepath,
        )
    return result


@lru_cache(maxsize=1)
def _load_configured_schema() -> LoadResult:
    return load_schema_file(settings.SCHEMA_PATH)


def get_schema() -> LoadResult:
    """FastAPI dependency — the calculator loaded once for the process."""
    return _load_configured_schema()
