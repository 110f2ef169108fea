"""
In-memory stores for the storefront.

The catalog and the ledger are plain lists of pydantic records. Records are
never mutated in place: writes replace the stored record with an updated
copy, so a record handed out by a getter keeps its values.
"""

import logging
import os
from datetime import datetime
from typing import Dict, List, Optional

from bson import ObjectId

import seed_data
from cart import Cart
from schemas import Product, Transaction

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    return f"{prefix}_{ObjectId()}"


class CatalogStore:
    def __init__(self, products: Optional[List[Product]] = None):
        self._products: List[Product] = list(products or [])

    def __len__(self):
        return len(self._products)

    def _index(self, product_id: str) -> Optional[int]:
        for i, p in enumerate(self._products):
            if p.id == product_id:
                return i
        return None

    def get_product(self, product_id: str) -> Optional[Product]:
        i = self._index(product_id)
        return None if i is None else self._products[i]

    def list_products(self, q: Optional[str] = None, category: Optional[str] = None) -> List[Product]:
        items = self._products
        if q:
            needle = q.lower()
            items = [p for p in items if needle in p.name.lower() or needle in p.description.lower()]
        if category:
            items = [p for p in items if p.category == category]
        return list(items)

    def categories(self) -> List[str]:
        return sorted({p.category for p in self._products if p.category})

    def stocks(self) -> Dict[str, int]:
        return {p.id: p.stock for p in self._products}

    def add_product(self, data: dict) -> Product:
        product = Product(id=new_id("prod"), **data)
        self._products.append(product)
        logger.info("Added product %s (%s)", product.id, product.name)
        return product

    def update_product(self, product_id: str, updates: dict) -> Optional[Product]:
        i = self._index(product_id)
        if i is None:
            return None
        merged = {**self._products[i].model_dump(), **updates, "id": product_id}
        self._products[i] = Product(**merged)
        return self._products[i]

    def delete_product(self, product_id: str) -> bool:
        i = self._index(product_id)
        if i is None:
            return False
        del self._products[i]
        logger.info("Deleted product %s", product_id)
        return True

    def set_stock(self, product_id: str, new_stock: int) -> None:
        i = self._index(product_id)
        if i is None:
            raise KeyError(product_id)
        if new_stock < 0:
            raise ValueError(f"Stock for {product_id} cannot go below zero")
        self._products[i] = self._products[i].model_copy(update={"stock": new_stock})

    def restock(self, product_id: str, quantity: int) -> Optional[Product]:
        product = self.get_product(product_id)
        if product is None:
            return None
        self.set_stock(product_id, product.stock + quantity)
        return self.get_product(product_id)


class Ledger:
    def __init__(self, transactions: Optional[List[Transaction]] = None):
        self._transactions: List[Transaction] = list(transactions or [])

    def __len__(self):
        return len(self._transactions)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for tx in self._transactions:
            if tx.id == transaction_id:
                return tx
        return None

    def list_transactions(self, type: Optional[str] = None, date: Optional[str] = None) -> List[Transaction]:
        """Transactions newest first, optionally filtered by type and ``YYYY-MM-DD`` date."""
        items = self._transactions
        if type:
            items = [tx for tx in items if tx.type == type]
        if date:
            items = [tx for tx in items if tx.date.strftime("%Y-%m-%d") == date]
        return sorted(items, key=lambda tx: tx.date, reverse=True)

    def upsert_transaction(self, transaction: Transaction) -> None:
        for i, tx in enumerate(self._transactions):
            if tx.id == transaction.id:
                self._transactions[i] = transaction
                return
        self._transactions.insert(0, transaction)

    def remove_transaction(self, transaction_id: str) -> bool:
        before = len(self._transactions)
        self._transactions = [tx for tx in self._transactions if tx.id != transaction_id]
        return len(self._transactions) < before


class Database:
    """Catalog, ledger and the session cart."""

    def __init__(self, catalog: Optional[CatalogStore] = None, ledger: Optional[Ledger] = None):
        self.catalog = catalog or CatalogStore()
        self.ledger = ledger or Ledger()
        self.cart = Cart()

    @classmethod
    def seeded(cls, now: Optional[datetime] = None) -> "Database":
        catalog = CatalogStore([Product(**p) for p in seed_data.PRODUCTS])
        ledger = Ledger([Transaction(**t) for t in seed_data.transactions(now)])
        return cls(catalog, ledger)

    def reset(self, seed: bool = True) -> None:
        fresh = Database.seeded() if seed else Database()
        self.catalog = fresh.catalog
        self.ledger = fresh.ledger
        self.cart = fresh.cart


def seed_enabled() -> bool:
    return os.getenv("SEED_DATA", "1").lower() not in ("0", "false", "no")


db = Database.seeded() if seed_enabled() else Database()


def get_db() -> Database:
    return db
