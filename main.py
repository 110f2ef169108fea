import logging
import math
import os
import re
from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from typing import List, Optional

import inventory
from database import Database, get_db, seed_enabled
from seed_data import PLACEHOLDER_IMAGE
from schemas import (
    Product, ProductCreate, ProductUpdate, Restock, ProductImportRow,
    Transaction, PlaceOrder, EditOrder, Checkout, CartItemIn, CartQuantity,
    ManualRecord, FinancialReport,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", 5))

app = FastAPI(title="Storefront Back-Office API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    return {"message": "Storefront Backend Running"}


@app.get("/test")
def test_store(db: Database = Depends(get_db)):
    return {
        "backend": "✅ Running",
        "store": "in-memory",
        "products": len(db.catalog),
        "transactions": len(db.ledger),
        "cart_lines": len(db.cart),
    }


# Utility

STATUS_CODES = {
    "NOT_FOUND": 404,
    "PRODUCT_NOT_FOUND": 404,
    "INSUFFICIENT_STOCK": 409,
}


def order_error(e: inventory.OrderError) -> HTTPException:
    return HTTPException(status_code=STATUS_CODES.get(e.code, 400), detail=e.to_dict())


def product_or_404(db: Database, product_id: str) -> Product:
    product = db.catalog.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# Products
@app.get("/api/products", response_model=List[Product])
def list_products(q: Optional[str] = None, category: Optional[str] = None, db: Database = Depends(get_db)):
    return db.catalog.list_products(q, category)


@app.post("/api/products", response_model=Product, status_code=201)
def create_product(product: ProductCreate, db: Database = Depends(get_db)):
    return db.catalog.add_product(product.model_dump())


def parse_price(value) -> Optional[float]:
    """Spreadsheet price: numbers pass through, text keeps only digits, '.' and '-'."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = re.sub(r"[^0-9.-]+", "", value)
    try:
        price = float(value)
    except ValueError:
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


def parse_stock(value) -> Optional[int]:
    """Spreadsheet stock: a whole, non-negative number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not re.fullmatch(r"\d+", value):
            return None
        return int(value)
    if isinstance(value, float) and not value.is_integer():
        return None
    stock = int(value)
    return stock if stock >= 0 else None


# Bulk import: invalid rows are skipped and reported, valid ones are added
@app.post("/api/products/import")
def import_products(rows: List[ProductImportRow], db: Database = Depends(get_db)):
    added, skipped = [], []
    for row_no, row in enumerate(rows, start=1):
        name = (row.name or "").strip()
        if not name:
            skipped.append({"row": row_no, "reason": "Product name is missing"})
            continue
        price = parse_price(row.price)
        if price is None:
            skipped.append({"row": row_no, "reason": f"Invalid price for {name}"})
            continue
        stock = parse_stock(row.stock)
        if stock is None:
            skipped.append({"row": row_no, "reason": f"Invalid stock quantity for {name}"})
            continue
        product = db.catalog.add_product({
            "name": name,
            "description": (row.description or "").strip(),
            "price": price,
            "category": "Uncategorized",
            "image_url": PLACEHOLDER_IMAGE,
            "stock": stock,
            "data_ai_hint": (row.data_ai_hint or "").strip() or "product placeholder",
        })
        added.append(product)
    if not added:
        raise HTTPException(status_code=400, detail={"message": "No valid products found to import", "skipped": skipped})
    return {"added": added, "skipped": skipped}


@app.get("/api/products/{product_id}", response_model=Product)
def get_product(product_id: str, db: Database = Depends(get_db)):
    return product_or_404(db, product_id)


@app.put("/api/products/{product_id}", response_model=Product)
def update_product(product_id: str, product: ProductUpdate, db: Database = Depends(get_db)):
    updates = {k: v for k, v in product.model_dump().items() if v is not None}
    updated = db.catalog.update_product(product_id, updates)
    if updated is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return updated


@app.delete("/api/products/{product_id}")
def delete_product(product_id: str, db: Database = Depends(get_db)):
    if not db.catalog.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    db.cart.remove(product_id)
    return {"ok": True}


@app.post("/api/products/{product_id}/restock", response_model=Product)
def restock_product(product_id: str, payload: Restock, db: Database = Depends(get_db)):
    product = db.catalog.restock(product_id, payload.quantity)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@app.get("/api/categories")
def list_categories(db: Database = Depends(get_db)):
    return db.catalog.categories()


# Cart
def cart_view(db: Database) -> dict:
    return {
        "items": [line.model_dump() for line in db.cart.lines],
        "total": db.cart.total(),
        "count": db.cart.item_count(),
    }


@app.get("/api/cart")
def get_cart(db: Database = Depends(get_db)):
    return cart_view(db)


@app.post("/api/cart/items")
def cart_add(item: CartItemIn, db: Database = Depends(get_db)):
    product = product_or_404(db, item.product_id)
    if product.stock == 0:
        raise HTTPException(status_code=409, detail=f"{product.name} is out of stock")
    db.cart.add(product, item.quantity)
    return cart_view(db)


@app.put("/api/cart/items/{product_id}")
def cart_update(product_id: str, payload: CartQuantity, db: Database = Depends(get_db)):
    product = db.catalog.get_product(product_id)
    stock = product.stock if product else None
    db.cart.update_quantity(product_id, payload.quantity, stock=stock)
    return cart_view(db)


@app.delete("/api/cart/items/{product_id}")
def cart_remove(product_id: str, db: Database = Depends(get_db)):
    db.cart.remove(product_id)
    return cart_view(db)


@app.delete("/api/cart")
def cart_clear(db: Database = Depends(get_db)):
    db.cart.clear()
    return cart_view(db)


# Checkout: place an order from the cart, then clear it
@app.post("/api/checkout", response_model=Transaction, status_code=201)
def checkout(details: Checkout, db: Database = Depends(get_db)):
    try:
        transaction = inventory.place_order(
            db.catalog, db.ledger, db.cart.order_items(), description=f"Order by {details.name}"
        )
    except inventory.OrderError as e:
        raise order_error(e)
    db.cart.clear()
    return transaction


# Orders: placing decrements stock, editing applies the net change, deleting restocks
@app.post("/api/orders", response_model=Transaction, status_code=201)
def create_order(order: PlaceOrder, db: Database = Depends(get_db)):
    try:
        return inventory.place_order(db.catalog, db.ledger, order.lines, description=order.description)
    except inventory.OrderError as e:
        raise order_error(e)


@app.get("/api/orders", response_model=List[Transaction])
def list_orders(date: Optional[str] = None, db: Database = Depends(get_db)):
    return db.ledger.list_transactions(type="sale", date=date)


@app.put("/api/orders/{transaction_id}", response_model=Transaction)
def edit_order(transaction_id: str, order: EditOrder, db: Database = Depends(get_db)):
    items = [item for item in order.items if item.quantity != 0]
    try:
        return inventory.edit_order(db.catalog, db.ledger, transaction_id, items)
    except inventory.OrderError as e:
        raise order_error(e)


@app.delete("/api/orders/{transaction_id}")
def delete_order(transaction_id: str, db: Database = Depends(get_db)):
    try:
        inventory.delete_order(db.catalog, db.ledger, transaction_id)
    except inventory.OrderError as e:
        raise order_error(e)
    return {"ok": True}


# Ledger
@app.get("/api/transactions", response_model=List[Transaction])
def list_transactions(type: Optional[str] = None, date: Optional[str] = None, db: Database = Depends(get_db)):
    return db.ledger.list_transactions(type=type, date=date)


@app.post("/api/transactions", response_model=Transaction, status_code=201)
def record_transaction(record: ManualRecord, db: Database = Depends(get_db)):
    try:
        return inventory.add_manual_record(db.ledger, record.type, record.amount, record.description, record.category)
    except inventory.OrderError as e:
        raise order_error(e)


# Reports
def financial_summary(transactions: List[Transaction]) -> FinancialReport:
    # Expenses are stored negative; take magnitudes so older positive entries count the same
    total_income = sum(tx.total_amount for tx in transactions if tx.type in ("sale", "income"))
    total_expenses = sum(abs(tx.total_amount) for tx in transactions if tx.type == "expense")
    return FinancialReport(
        total_income=round(total_income, 2),
        total_expenses=round(total_expenses, 2),
        net_profit=round(total_income - total_expenses, 2),
    )


@app.get("/api/reports/financial")
def financial_report(db: Database = Depends(get_db)):
    transactions = db.ledger.list_transactions()
    return {
        "summary": financial_summary(transactions),
        "transactions": transactions,
    }


@app.get("/api/stats")
def get_stats(db: Database = Depends(get_db)):
    transactions = db.ledger.list_transactions()
    sales = [tx for tx in transactions if tx.type == "sale"]
    summary = financial_summary(transactions)
    low_stock = [p for p in db.catalog.list_products() if p.stock < LOW_STOCK_THRESHOLD]

    return {
        "counts": {
            "products": len(db.catalog),
            "orders": len(sales),
            "transactions": len(transactions),
        },
        "total_sales": round(sum(tx.total_amount for tx in sales), 2),
        "total_income": summary.total_income,
        "total_expenses": summary.total_expenses,
        "net_profit": summary.net_profit,
        "low_stock": [{"id": p.id, "name": p.name, "stock": p.stock} for p in low_stock],
    }


@app.post("/api/reset")
def reset_store(db: Database = Depends(get_db)):
    seed = seed_enabled()
    db.reset(seed=seed)
    logger.info("Store reset (%s)", "seed data" if seed else "empty")
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
