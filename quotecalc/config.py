from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_SCHEMA_PATH = Path(__file__).parent / "data" / "calculator.json"


class Settings(BaseSettings):
    SCHEMA_PATH: str = str(DEFAULT_SCHEMA_PATH)
    EXPORT_DIR: str = "./quotes"
    QUOTE_PREFIX: str = "Calculator"
    COMPANY_NAME: str = ""
    CLOSING_NOTE: str = (
        "Thank you for your interest. Prices are estimates based on the "
        "selections above and are valid for 30 days."
    )
    MAX_SESSIONS: int = 1000
    SESSION_IDLE_MINUTES: int = 60
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
