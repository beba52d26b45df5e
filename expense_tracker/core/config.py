from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR, DB_FILENAME, GLOBAL_MONTHLY_CAP).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Expense Tracker"
    debug: bool = False
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "expenses.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Budget enforcement
    # Flat cap applied across all categories for one calendar month; None disables it.
    global_monthly_cap: Optional[Decimal] = Decimal("5000")

    # Expense validation
    # Oldest accepted expense date, in days before today; None disables the lookback rule.
    expense_max_age_days: Optional[int] = 365

    # Analytics defaults
    top_expenses_default: int = 10
    trend_days: int = 30

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        if self.global_monthly_cap is not None and self.global_monthly_cap <= 0:
            raise ValueError("global_monthly_cap must be positive when set")
        if self.expense_max_age_days is not None and self.expense_max_age_days < 0:
            raise ValueError("expense_max_age_days cannot be negative")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
