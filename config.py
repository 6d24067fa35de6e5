import os
from functools import lru_cache
from pathlib import Path


class Settings:
    def __init__(
        self,
        database_url: str,
        log_level: str,
        default_page_size: int,
        max_page_size: int,
        db_timeout_secs: float,
    ) -> None:
        self.database_url = database_url
        self.log_level = log_level
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.db_timeout_secs = db_timeout_secs


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("LEDGER_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "ledger.db"
    database_url = os.getenv("LEDGER_DATABASE_URL", f"sqlite:///{default_db}")
    log_level = os.getenv("LEDGER_LOG_LEVEL", "INFO").upper()
    default_page_size = int(os.getenv("LEDGER_DEFAULT_PAGE_SIZE", "20"))
    max_page_size = int(os.getenv("LEDGER_MAX_PAGE_SIZE", "100"))
    db_timeout_secs = float(os.getenv("LEDGER_DB_TIMEOUT_SECS", "5"))
    return Settings(
        database_url=database_url,
        log_level=log_level,
        default_page_size=default_page_size,
        max_page_size=max_page_size,
        db_timeout_secs=db_timeout_secs,
    )
