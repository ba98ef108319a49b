from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .routers import calculator
from .schema_loader import get_schema
from .schemas import SchemaNotFound

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("quotecalc")

app = FastAPI(
    title="Quote Calculator",
    description="Configuration-driven pricing calculator with PDF quote export",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(calculator.router, prefix="/api")


@app.get("/health")
def health(schema=Depends(get_schema)):
    return {
        "status": "ok",
        "app": "quotecalc",
        "calculator_loaded": not isinstance(schema, SchemaNotFound),
    }


@app.on_event("startup")
def load_calculator():
    """Load the calculator schema once so configuration problems show up in the log at boot."""
    schema = get_schema()
    if isinstance(schema, SchemaNotFound):
        logger.warning("Starting without a calculator: %s", schema.reason)
    else:
        logger.info("Calculator '%s' ready", schema.name)
