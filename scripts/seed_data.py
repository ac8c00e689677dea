#!/usr/bin/env python3
"""
Create a data file seeded with the customers/orders example.

Usage:
  python scripts/seed_data.py [--data-file mockapi.json] [--force]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from mockapi.core.config import get_settings
from mockapi.services.datastore import DEFAULT_FK_SUFFIX, DataStore
from mockapi.repositories.json_storage import JsonStorage


def build_schema(fk_suffix: str = DEFAULT_FK_SUFFIX) -> dict:
    """Customers/orders schema whose foreign key follows ``fk_suffix``."""
    return {
        "customers": {
            "schema": {"fields": ["firstname", "lastname", "email"], "has": ["orders"]},
            "resources": {},
        },
        "orders": {
            "schema": {
                "fields": [f"customers{fk_suffix}", "orderdate", "ordertotal"],
                "belongsTo": ["customers"],
            },
            "resources": {},
        },
    }


SCHEMA = build_schema()

CUSTOMERS = [
    ({"firstname": "John", "lastname": "Doe", "email": "jdoe@email.com"},
     [("2015/10/13", "325.00"), ("2016/07/21", "1287.00")]),
    ({"firstname": "Alex", "lastname": "Martin", "email": "alex.martin@somewhere.com"},
     [("2017/01/13", "25.00"), ("2017/04/11", "342.00"), ("2017/06/05", "854.00"), ("2017/09/23", "1123.00")]),
    ({"firstname": "Leroy", "lastname": "Jenkins", "email": "gotchicken@email.com"},
     [("2013/10/13", "56.13")]),
    ({"firstname": "Miranda", "lastname": "Gonzales", "email": "mg23@email.com"},
     [("2017/06/12", "2344.00"), ("2017/07/28", "1985.00")]),
    ({"firstname": "Beth", "lastname": "Allen", "email": "bethallen@acompany.com"},
     [("2017/01/13", "345.00"), ("2017/10/01", "614.00"), ("2017/11/19", "456.00")]),
    ({"firstname": "Chris", "lastname": "Collins", "email": "cc123@email.com"},
     [("2017/10/03", "123.00"), ("2017/11/07", "473.00")]),
    ({"firstname": "Glenn", "lastname": "Quagmire", "email": "giggity@email.com"},
     [("2017/01/05", "5674.00"), ("2017/12/31", "4545.00"), ("2018/01/02", "2734.00")]),
    ({"firstname": "Sarah", "lastname": "Connor", "email": "terminatrix@email.com"},
     [("2016/10/13", "2342.00"), ("2017/7/21", "3412.00")]),
]


def seed(store: DataStore) -> int:
    """Insert the example customers and their orders; returns the order count."""
    fk = store.foreign_key("customers")
    orders = 0
    for customer, customer_orders in CUSTOMERS:
        customer_id = store.save_resource("customers", customer)
        for orderdate, ordertotal in customer_orders:
            store.save_resource("orders", {fk: customer_id, "orderdate": orderdate, "ordertotal": ordertotal})
            orders += 1
    return orders


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Seed a MockAPI data file with example data")
    ap.add_argument("--data-file", default=settings.data_file, help=f"Data file (default: {settings.data_file})")
    ap.add_argument("--force", action="store_true", help="Replace the data file if it already exists")
    args = ap.parse_args()

    path = Path(args.data_file)
    if path.exists():
        if not args.force:
            raise SystemExit(f"'{path}' already exists; use --force to replace it")
        path.unlink()

    store = DataStore(JsonStorage(path), build_schema(settings.fk_suffix), fk_suffix=settings.fk_suffix)
    orders = seed(store)
    print(f"OK: {path} seeded")
    print(f"  customers: {len(CUSTOMERS)}")
    print(f"  orders: {orders}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
