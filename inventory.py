"""
Order and inventory reconciliation.

Every sale in the ledger has already had its quantities taken out of product
stock. Placing, editing and deleting an order keep that true: the new stock
levels are worked out on a copy of the stock table first, and the catalog is
only written once every line has been checked.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from database import CatalogStore, Ledger, new_id
from schemas import OrderLine, Transaction, TransactionItem

logger = logging.getLogger(__name__)


class OrderError(Exception):
    code = "ORDER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class NotFound(OrderError):
    code = "NOT_FOUND"


class WrongType(OrderError):
    code = "WRONG_TYPE"


class ProductNotFound(OrderError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class NegativeQuantity(OrderError):
    code = "NEGATIVE_QUANTITY"

    def __init__(self, product_id: str, quantity: int):
        super().__init__(f"Quantity for {product_id} cannot be negative ({quantity})")
        self.product_id = product_id


class InsufficientStock(OrderError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, available: int, requested: int):
        super().__init__(f"Insufficient stock for {product_id}: {available} available, {requested} requested")
        self.product_id = product_id
        self.available = available
        self.requested = requested

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "product_id": self.product_id,
            "available": self.available,
            "requested": self.requested,
        }


class EmptyCart(OrderError):
    code = "EMPTY_CART"


class EmptyResult(OrderError):
    code = "EMPTY_RESULT"


class InvalidRecord(OrderError):
    code = "VALIDATION_ERROR"


def order_total(items: Iterable[TransactionItem]) -> float:
    return round(sum(item.price * item.quantity for item in items), 2)


def reconcile_stock(current_stocks: Dict[str, int], original_items, new_items) -> Dict[str, int]:
    """Return the stock table after reverting ``original_items`` and reserving ``new_items``.

    ``current_stocks`` is left untouched. Original items whose product no
    longer exists are ignored. New items are checked in order and the first
    failure raises, so a caller that commits only the returned table never
    applies a partial change.
    """
    working = dict(current_stocks)
    for item in original_items:
        if item.product_id in working:
            working[item.product_id] += item.quantity

    for item in new_items:
        if item.product_id not in working:
            raise ProductNotFound(item.product_id)
        if item.quantity < 0:
            raise NegativeQuantity(item.product_id, item.quantity)
        available = working[item.product_id]
        if item.quantity > available:
            raise InsufficientStock(item.product_id, available, item.quantity)
        working[item.product_id] = available - item.quantity
    return working


def _commit_stocks(catalog: CatalogStore, before: Dict[str, int], after: Dict[str, int]) -> None:
    for product_id, stock in after.items():
        if before.get(product_id) != stock:
            catalog.set_stock(product_id, stock)


def place_order(catalog: CatalogStore, ledger: Ledger, lines: List[Union[OrderLine, TransactionItem]],
                description: Optional[str] = None) -> Transaction:
    """Create a sale from ``lines`` and take its quantities out of stock.

    Plain ``OrderLine``s are priced from the catalog. ``TransactionItem``s
    already carry the name and price the customer saw and keep them.
    """
    lines = [line for line in lines if line.quantity != 0]
    if not lines:
        raise EmptyCart("Cannot place an order with an empty cart")

    before = catalog.stocks()
    after = reconcile_stock(before, [], lines)

    items = []
    for line in lines:
        if isinstance(line, TransactionItem):
            items.append(line)
            continue
        product = catalog.get_product(line.product_id)
        items.append(TransactionItem(product_id=product.id, name=product.name,
                                     quantity=line.quantity, price=product.price))

    _commit_stocks(catalog, before, after)
    transaction = Transaction(
        id=new_id("txn_sale"),
        date=datetime.now(timezone.utc),
        items=items,
        total_amount=order_total(items),
        status="Completed",
        type="sale",
        description=description,
    )
    ledger.upsert_transaction(transaction)
    logger.info("Placed order %s for %.2f", transaction.id, transaction.total_amount)
    return transaction


def _get_sale(ledger: Ledger, transaction_id: str) -> Transaction:
    transaction = ledger.get_transaction(transaction_id)
    if transaction is None:
        raise NotFound(f"Order not found: {transaction_id}")
    if transaction.type != "sale":
        raise WrongType(f"Transaction {transaction_id} is a {transaction.type} record, not a sale")
    return transaction


def edit_order(catalog: CatalogStore, ledger: Ledger, transaction_id: str,
               new_items: List[TransactionItem]) -> Transaction:
    transaction = _get_sale(ledger, transaction_id)
    if not new_items:
        raise EmptyResult("An order must have at least one item; delete the order instead")

    before = catalog.stocks()
    after = reconcile_stock(before, transaction.items, new_items)

    _commit_stocks(catalog, before, after)
    updated = transaction.model_copy(update={
        "items": list(new_items),
        "total_amount": order_total(new_items),
        "date": datetime.now(timezone.utc),
    })
    ledger.upsert_transaction(updated)
    logger.info("Edited order %s, new total %.2f", transaction_id, updated.total_amount)
    return updated


def delete_order(catalog: CatalogStore, ledger: Ledger, transaction_id: str) -> None:
    transaction = _get_sale(ledger, transaction_id)
    for item in transaction.items:
        if catalog.get_product(item.product_id) is None:
            logger.warning("Order %s: product %s no longer exists, skipping restock of %d",
                           transaction_id, item.product_id, item.quantity)
            continue
        catalog.restock(item.product_id, item.quantity)
    ledger.remove_transaction(transaction_id)
    logger.info("Deleted order %s", transaction_id)


def add_manual_record(ledger: Ledger, type: str, amount: float, description: str,
                      category: str) -> Transaction:
    if type not in ("income", "expense"):
        raise InvalidRecord(f"Unknown record type: {type}")
    if amount is None or amount <= 0:
        raise InvalidRecord("Please enter a valid positive amount")
    if not (description or "").strip() or not (category or "").strip():
        raise InvalidRecord("Description and category are required")

    magnitude = round(abs(amount), 2)
    record = Transaction(
        id=new_id(f"txn_{type}"),
        date=datetime.now(timezone.utc),
        items=[],
        total_amount=-magnitude if type == "expense" else magnitude,
        status="Completed",
        type=type,
        description=description.strip(),
        category=category.strip(),
    )
    ledger.upsert_transaction(record)
    logger.info("Recorded %s %s of %.2f", type, record.id, magnitude)
    return record
