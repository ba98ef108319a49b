"""
Calculator API — one form session per browser tab.

GET    /api/calculator                     — Calculator schema
GET    /api/calculator/form                — Blank form view (degraded when no calculator)
POST   /api/calculator/sessions            — Start a form session
GET    /api/calculator/sessions/{id}       — Current form view
POST   /api/calculator/sessions/{id}/select — Dropdown change
POST   /api/calculator/sessions/{id}/toggle — Toggle/Checkbox change
POST   /api/calculator/sessions/{id}/reset  — Clear all selections
GET    /api/calculator/sessions/{id}/line-items — Itemized selections + total
POST   /api/calculator/sessions/{id}/export — Download the PDF quote
DELETE /api/calculator/sessions/{id}       — Discard the session
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ..config import settings
from ..exporter import EmptyExportError, build_line_items, check_exportable, export_quote
from ..pricing import format_money
from ..renderer import UnknownControlError, handle_select, handle_toggle, render_form
from ..schema_loader import get_schema
from ..schemas import (
    CalculatorSchema,
    FormView,
    LineItemsResponse,
    SchemaNotFound,
    SelectRequest,
    SessionResponse,
    ToggleRequest,
)
from ..selection import SelectionState, SessionStore, get_store

router = APIRouter(prefix="/calculator", tags=["calculator"])


def _require_schema(schema) -> CalculatorSchema:
    if isinstance(schema, SchemaNotFound):
        raise HTTPException(status_code=404, detail=f"No calculator found: {schema.reason}")
    return schema


def _get_session(session_id: str, store: SessionStore) -> SelectionState:
    try:
        return store.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Session not found")


@router.get("", response_model=CalculatorSchema)
def get_calculator(schema=Depends(get_schema)):
    return _require_schema(schema)


@router.get("/form", response_model=FormView)
def get_blank_form(schema=Depends(get_schema)):
    """Form view with no selections. Degraded view when no calculator is loaded."""
    return render_form(schema, SelectionState())


@router.post("/sessions", response_model=SessionResponse)
def start_session(schema=Depends(get_schema), store: SessionStore = Depends(get_store)):
    """Start a form session with empty selections."""
    schema = _require_schema(schema)
    session_id, state = store.create()
    return SessionResponse(session_id=session_id, form=render_form(schema, state))


@router.get("/sessions/{session_id}", response_model=FormView)
def get_form(session_id: str, schema=Depends(get_schema), store: SessionStore = Depends(get_store)):
    schema = _require_schema(schema)
    return render_form(schema, _get_session(session_id, store))


@router.post("/sessions/{session_id}/select", response_model=FormView)
def select_option(
    session_id: str,
    request: SelectRequest,
    schema=Depends(get_schema),
    store: SessionStore = Depends(get_store),
):
    """Replace the chosen option of a dropdown. An empty value clears it."""
    schema = _require_schema(schema)
    state = _get_session(session_id, store)
    try:
        handle_select(schema, state, request.field_id, request.value)
    except UnknownControlError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return render_form(schema, state)


@router.post("/sessions/{session_id}/toggle", response_model=FormView)
def toggle_option(
    session_id: str,
    request: ToggleRequest,
    schema=Depends(get_schema),
    store: SessionStore = Depends(get_store),
):
    schema = _require_schema(schema)
    state = _get_session(session_id, store)
    try:
        handle_toggle(schema, state, request.field_id, request.option_text, request.checked)
    except UnknownControlError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return render_form(schema, state)


@router.post("/sessions/{session_id}/reset", response_model=FormView)
def reset_session(session_id: str, schema=Depends(get_schema), store: SessionStore = Depends(get_store)):
    schema = _require_schema(schema)
    state = _get_session(session_id, store)
    state.clear()
    return render_form(schema, state)


@router.get("/sessions/{session_id}/line-items", response_model=LineItemsResponse)
def get_line_items(session_id: str, schema=Depends(get_schema), store: SessionStore = Depends(get_store)):
    schema = _require_schema(schema)
    state = _get_session(session_id, store)
    items = build_line_items(schema, state.chosen_values, state.labels, state.chosen_flags)
    try:
        check_exportable(items, state.chosen_values)
        exportable = True
    except EmptyExportError:
        exportable = False
    total = state.total(schema)
    return LineItemsResponse(
        items=items,
        total=total,
        total_display=format_money(total),
        exportable=exportable,
    )


@router.post("/sessions/{session_id}/export")
def export_session(session_id: str, schema=Depends(get_schema), store: SessionStore = Depends(get_store)):
    """
    Generate the PDF quote, save it to the export directory and download it.

    Returns: application/pdf, or 400 when nothing has been selected
    """
    schema = _require_schema(schema)
    state = _get_session(session_id, store)
    try:
        path = export_quote(
            schema,
            state,
            export_dir=settings.EXPORT_DIR,
            prefix=settings.QUOTE_PREFIX,
            company_name=settings.COMPANY_NAME,
            closing_note=settings.CLOSING_NOTE,
        )
    except EmptyExportError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return FileResponse(path, media_type="application/pdf", filename=path.name)


@router.delete("/sessions/{session_id}")
def discard_session(session_id: str, store: SessionStore = Depends(get_store)):
    if not store.discard(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"discarded": session_id}
