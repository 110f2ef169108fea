"""Session cart: (product snapshot, quantity) lines bounded by product stock."""

from typing import List, Optional

from schemas import CartLine, Product, TransactionItem


class Cart:
    def __init__(self):
        self.lines: List[CartLine] = []

    def __len__(self):
        return len(self.lines)

    def _find(self, product_id: str):
        for line in self.lines:
            if line.product.id == product_id:
                return line
        return None

    def add(self, product: Product, quantity: int = 1) -> None:
        existing = self._find(product.id)
        if existing:
            self.update_quantity(product.id, existing.quantity + quantity, stock=product.stock)
            return
        quantity = min(quantity, product.stock)
        if quantity > 0:
            self.lines.append(CartLine(product=product, quantity=quantity))

    def update_quantity(self, product_id: str, quantity: int, stock: Optional[int] = None) -> None:
        """Set a line's quantity, clamped to stock.

        ``stock`` refreshes the line's stock bound from the catalog; the
        snapshotted price and name are kept.
        """
        line = self._find(product_id)
        if line is None:
            return
        if stock is not None:
            line.product = line.product.model_copy(update={"stock": stock})
        quantity = max(0, min(quantity, line.product.stock))
        if quantity == 0:
            self.remove(product_id)
        else:
            line.quantity = quantity

    def remove(self, product_id: str) -> None:
        self.lines = [line for line in self.lines if line.product.id != product_id]

    def clear(self) -> None:
        self.lines = []

    def total(self) -> float:
        return round(sum(line.product.price * line.quantity for line in self.lines), 2)

    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def order_items(self) -> List[TransactionItem]:
        """Lines as sale items, priced at what the cart shows."""
        return [
            TransactionItem(product_id=line.product.id, name=line.product.name,
                            quantity=line.quantity, price=line.product.price)
            for line in self.lines
        ]
