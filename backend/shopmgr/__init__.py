# backend/shopmgr/__init__.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import Config
from .extensions import DataStores
from .logging_config import configure_logging
from .services.sales_service import recover_pending_sale
from .storage import StorageError

logger = logging.getLogger(__name__)


@dataclass
class ShopApp:
    config: Config
    stores: DataStores


def create_app(config: Config | None = None) -> ShopApp:
    """
    Build the application context for one run.

    - configures logging from config
    - creates the data directory
    - completes any sale left half-written by a previous run
    """
    if config is None:
        config = Config.from_env()

    configure_logging(config.log_level, config.log_dir)

    try:
        config.data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"Unable to create data directory {config.data_dir}: {exc}") from exc

    stores = DataStores.from_config(config)

    recovered = recover_pending_sale(stores)
    if recovered is not None:
        logger.warning("Completed interrupted sale", extra={"extra": {"sale_id": recovered.id}})

    return ShopApp(config=config, stores=stores)
