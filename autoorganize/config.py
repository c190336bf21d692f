import sys
from enum import Enum
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- PATH LOGIC ---
# (Keeps the database next to the executable when frozen by PyInstaller)
if getattr(sys, 'frozen', False):
    BASE_DIR = Path(sys._MEIPASS)
else:
    BASE_DIR = Path(".")

DB_FILE = BASE_DIR / "autoorganize.db"
# ------------------


class TaskDeletePolicy(str, Enum):
    """
    What deleting a task does to the invoices linked to it.
    The invoices themselves always survive the task.
    """
    STRIP_LINE_ITEMS = "strip_line_items"  # removes their line items, paid or not
    REJECT_IF_PAID = "reject_if_paid"      # refuses the delete if any of them is paid


#---------------CONFIGURATION---------------
class Settings(BaseSettings):
    # Read from AUTOORGANIZE_* environment variables (or a .env file); keyword arguments win
    model_config = SettingsConfigDict(
        env_prefix="AUTOORGANIZE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    database_url: str = f"sqlite:///{DB_FILE}"
    task_delete_policy: TaskDeletePolicy = TaskDeletePolicy.STRIP_LINE_ITEMS
    echo_sql: bool = False
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.strip().upper()
