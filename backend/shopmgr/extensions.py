# Overview: Store handles shared by every service, built once from Config.

from __future__ import annotations

from dataclasses import dataclass

from .config import Config
from .models import Customer, Product, Sale, User
from .storage import (
    CUSTOMER_SCHEMA,
    PRODUCT_SCHEMA,
    SALE_SCHEMA,
    USER_SCHEMA,
    RecordStore,
)


@dataclass
class DataStores:
    config: Config
    products: RecordStore[Product]
    customers: RecordStore[Customer]
    sales: RecordStore[Sale]
    users: RecordStore[User]

    @classmethod
    def from_config(cls, config: Config) -> "DataStores":
        quote_all = config.quote_all
        return cls(
            config=config,
            products=RecordStore(config.products_path, PRODUCT_SCHEMA, quote_all=quote_all),
            customers=RecordStore(config.customers_path, CUSTOMER_SCHEMA, quote_all=quote_all),
            sales=RecordStore(config.sales_path, SALE_SCHEMA, quote_all=quote_all),
            users=RecordStore(config.users_path, USER_SCHEMA, quote_all=quote_all),
        )
