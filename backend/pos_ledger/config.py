"""
POS LEDGER: CONFIGURATION

Settings come from environment variables, optionally seeded from a .env
file next to the backend sources. Real environment variables win over
values in the .env file.

    POS_LEDGER_PATH     ledger JSON file          (data/transactions.json)
    POS_RECEIPT_DIR     receipt output directory  (receipts)
    POS_STORE_NAME      store name on receipts    (Shake-Stack Petrol)
    POS_STORE_ADDRESS   '|'-separated address lines
    POS_STORE_PHONE     store phone on receipts
    POS_LOG_LEVEL       logging level             (INFO)
"""

from dotenv import dotenv_values
from pydantic import BaseModel, field_validator
from pathlib import Path
from typing import List, Optional, Union
import os
import logging

ROOT_DIR = Path(__file__).parent.parent

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

ENV_VARS = {
    "ledger_path": "POS_LEDGER_PATH",
    "receipt_output_dir": "POS_RECEIPT_DIR",
    "store_name": "POS_STORE_NAME",
    "store_address": "POS_STORE_ADDRESS",
    "store_phone": "POS_STORE_PHONE",
    "log_level": "POS_LOG_LEVEL",
}


class Settings(BaseModel):
    ledger_path: Path = Path("data/transactions.json")
    receipt_output_dir: Path = Path("receipts")
    store_name: str = "Shake-Stack Petrol"
    store_address: str = "2808 W.Broadway|Vancouver|British Columbia|V6K2G7"
    store_phone: str = "(604)-XXX-XXXX"
    log_level: str = "INFO"

    class Config:
        frozen = True

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def store_address_lines(self) -> List[str]:
        return [line.strip() for line in self.store_address.split("|") if line.strip()]


def get_settings(env_file: Optional[Union[str, Path]] = None) -> Settings:
    """
    Build settings from the .env file (if present) and the environment.

    Args:
        env_file: .env path; defaults to backend/.env
    """
    path = Path(env_file) if env_file is not None else ROOT_DIR / '.env'
    values = {}
    file_values = dotenv_values(path) if path.is_file() else {}

    for field_name, env_var in ENV_VARS.items():
        value = os.environ.get(env_var, file_values.get(env_var))
        if value is not None:
            values[field_name] = value

    return Settings(**values)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging with the application format."""
    level = settings.log_level if settings is not None else "INFO"
    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT
    )
