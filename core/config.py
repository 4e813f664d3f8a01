# core/config.py
import os
from pathlib import Path
from pydantic import BaseModel, Field

BACKENDS = ("csv", "sqlite")


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Runtime configuration for the library console.

    Values come from the environment (see ``from_env``) and can be
    overridden by CLI options.
    """
    data_dir: Path = Path(".")
    backend: str = "csv"
    database_url: str = "sqlite:///library.db"
    loan_days: int = Field(default=14, ge=1)
    strict_csv: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """Build settings from LIBRARY_* / DATABASE_URL variables, then apply overrides.

        Overrides whose value is None are ignored so that unset CLI options
        fall through to the environment.
        """
        values = {
            "data_dir": Path(os.getenv("LIBRARY_DATA_DIR", ".")),
            "backend": os.getenv("LIBRARY_BACKEND", "csv").lower(),
            "database_url": os.getenv("DATABASE_URL", "sqlite:///library.db"),
            "loan_days": int(os.getenv("LIBRARY_LOAN_DAYS", "14")),
            "strict_csv": _env_flag("LIBRARY_STRICT_CSV"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        settings = cls(**values)
        if settings.backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{settings.backend}', expected one of {BACKENDS}")
        return settings

    @property
    def ledger_dir(self) -> Path:
        return self.data_dir / "library-data"

    @property
    def books_file(self) -> Path:
        return self.data_dir / "books.csv"

    @property
    def readers_file(self) -> Path:
        return self.data_dir / "user.csv"

    @property
    def librarians_file(self) -> Path:
        return self.data_dir / "librarian.csv"

    def ledger_file(self, name: str) -> Path:
        return self.ledger_dir / f"{name}.csv"
