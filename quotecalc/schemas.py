import enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class FieldVariant(str, enum.Enum):
    DROPDOWN = "Drop Down"
    TOGGLE = "Toggle"
    CHECKBOX = "Checkbox"
    DIVIDER = "Line"


def _as_text(value):
    if value is None or isinstance(value, str):
        return value
    return str(value)


# --- Calculator schema (loaded once, read-only) ---

class CalculatorOption(BaseModel):
    option_text: str = Field("", alias="optionText")
    option_value: Optional[str] = Field(None, alias="optionValue")
    option_hint: Optional[str] = Field(None, alias="optionHint")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("option_text", mode="before")
    @classmethod
    def _text_or_blank(cls, value):
        return "" if value is None else _as_text(value)

    @field_validator("option_value", "option_hint", mode="before")
    @classmethod
    def _keep_raw_text(cls, value):
        # Numbers in the JSON are kept in their string form; parsing happens in pricing
        return _as_text(value)


class CalculatorField(BaseModel):
    id: int = Field(alias="_id")
    variant: FieldVariant = Field(alias="type")
    label: str = ""
    description: Optional[str] = None
    alias: Optional[str] = None
    options: List[CalculatorOption] = []

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("label", mode="before")
    @classmethod
    def _label_or_blank(cls, value):
        return "" if value is None else _as_text(value)

    @field_validator("description", "alias", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return _as_text(value)

    @field_validator("options", mode="before")
    @classmethod
    def _missing_options_are_empty(cls, value):
        # Anything that is not an option object is dropped, not the whole field
        if not isinstance(value, list):
            return []
        return [option for option in value if isinstance(option, dict)]

    @property
    def key(self) -> str:
        """Selection key for this field: its alias, or one derived from the id."""
        return self.alias or f"drop_{self.id}"

    @property
    def is_choice_group(self) -> bool:
        return self.variant in (FieldVariant.TOGGLE, FieldVariant.CHECKBOX)

    @property
    def is_interactive(self) -> bool:
        return self.variant != FieldVariant.DIVIDER and len(self.options) > 0


class CalculatorSchema(BaseModel):
    name: str = "Calculator"
    fields: List[CalculatorField] = []

    class Config:
        frozen = True

    def field_by_id(self, field_id: int) -> Optional[CalculatorField]:
        for field in self.fields:
            if field.id == field_id:
                return field
        return None


class SchemaNotFound(BaseModel):
    """Marker returned instead of a schema when no usable calculator exists."""
    reason: str


# --- Export ---

class LineItem(BaseModel):
    section: str
    item: str
    price: float


class LineItemsResponse(BaseModel):
    items: List[LineItem] = []
    total: float
    total_display: str
    exportable: bool


# --- Form view ---

class ControlOption(BaseModel):
    value: str
    text: str
    display: str
    hint: Optional[str] = None
    checked: Optional[bool] = None


class Control(BaseModel):
    field_id: int
    kind: str  # "divider" | "static" | "select" | "checkbox_group"
    key: Optional[str] = None
    label: str = ""
    description: Optional[str] = None
    options: List[ControlOption] = []
    selected: Optional[str] = None


class FormView(BaseModel):
    name: str
    available: bool = True
    message: Optional[str] = None
    total: float = 0.0
    total_display: str = "$0.00"
    controls: List[Control] = []
    footer_note: str = ""


# --- Request / response bodies ---

class SelectRequest(BaseModel):
    field_id: int
    value: str = ""


class ToggleRequest(BaseModel):
    field_id: int
    option_text: str
    checked: bool = True


class SessionResponse(BaseModel):
    session_id: str
    form: FormView
