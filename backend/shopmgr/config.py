# backend/shopmgr/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

RECORD_FORMAT_ENHANCED = "enhanced"
RECORD_FORMAT_LEGACY = "legacy"


@dataclass
class Config:
    # Directory holding products.csv, customers.csv, sales.csv, users.csv
    data_dir: Path = field(default_factory=lambda: Path("."))

    # "enhanced" quotes every field; "legacy" writes the old unquoted layout
    record_format: str = RECORD_FORMAT_ENHANCED

    bcrypt_rounds: int = 12

    # Well-known bootstrap account, created only when users.csv is absent
    default_admin_username: str = "admin"
    default_admin_password: str = "admin"

    log_level: str = "WARNING"
    log_dir: Path | None = None  # None disables the rotating file handler

    products_filename: str = "products.csv"
    customers_filename: str = "customers.csv"
    sales_filename: str = "sales.csv"
    users_filename: str = "users.csv"
    sale_journal_filename: str = ".sale_journal"
    backup_dirname: str = "backups"

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir)
        if self.record_format not in (RECORD_FORMAT_ENHANCED, RECORD_FORMAT_LEGACY):
            raise ValueError(f"Unknown record format: {self.record_format}")

    @classmethod
    def from_env(cls, **overrides) -> "Config":
        """Build config from SHOPMGR_* environment variables; explicit overrides win."""
        values = {
            "data_dir": os.environ.get("SHOPMGR_DATA_DIR", "."),
            "record_format": os.environ.get("SHOPMGR_RECORD_FORMAT", RECORD_FORMAT_ENHANCED),
            "bcrypt_rounds": int(os.environ.get("SHOPMGR_BCRYPT_ROUNDS", "12")),
            "log_level": os.environ.get("SHOPMGR_LOG_LEVEL", "WARNING"),
            "log_dir": os.environ.get("SHOPMGR_LOG_DIR") or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def quote_all(self) -> bool:
        return self.record_format == RECORD_FORMAT_ENHANCED

    @property
    def products_path(self) -> Path:
        return self.data_dir / self.products_filename

    @property
    def customers_path(self) -> Path:
        return self.data_dir / self.customers_filename

    @property
    def sales_path(self) -> Path:
        return self.data_dir / self.sales_filename

    @property
    def users_path(self) -> Path:
        return self.data_dir / self.users_filename

    @property
    def sale_journal_path(self) -> Path:
        return self.data_dir / self.sale_journal_filename

    @property
    def backup_dir(self) -> Path:
        return self.data_dir / self.backup_dirname

    @property
    def store_paths(self) -> list[Path]:
        return [self.products_path, self.customers_path, self.sales_path, self.users_path]
