"""Mock catalog and ledger the store is seeded with on startup."""

from datetime import datetime, timedelta, timezone

PLACEHOLDER_IMAGE = "https://placehold.co/600x400.png"


def _product(pid, name, description, price, category, hint, stock):
    return {
        "id": pid,
        "name": name,
        "description": description,
        "price": price,
        "category": category,
        "image_url": PLACEHOLDER_IMAGE,
        "data_ai_hint": hint,
        "stock": stock,
    }


PRODUCTS = [
    _product("prod_1", "Modern Laptop", "High-performance laptop for work and play.", 1200, "Electronics", "electronics computer", 10),
    _product("prod_2", "Classic Novel", "A timeless piece of literature.", 20, "Books", "book reading", 50),
    _product("prod_3", "Cotton T-Shirt", "Comfortable and stylish cotton t-shirt.", 25, "Clothing", "clothing fashion", 100),
    _product("prod_4", "Espresso Machine", "Brew cafe-quality espresso at home.", 300, "Home Goods", "home kitchen", 15),
    _product("prod_5", "Wireless Headphones", "Noise-cancelling wireless headphones.", 150, "Electronics", "electronics audio", 30),
    _product("prod_6", "Yoga Mat", "Eco-friendly non-slip yoga mat.", 40, "Sports", "sports fitness", 40),
    _product("prod_7", "Smartphone Pro", "Latest generation smartphone with advanced features.", 999, "Electronics", "electronics mobile", 25),
    _product("prod_8", "The Art of Coding", "A comprehensive guide to software development.", 45, "Books", "book programming", 60),
    _product("prod_9", "Designer Jeans", "Premium quality denim jeans.", 120, "Clothing", "clothing denim", 35),
    _product("prod_10", "Smart Desk Lamp", "Adjustable LED desk lamp with smart features.", 75, "Home Goods", "home office", 22),
]


def transactions(now=None):
    """Seed ledger, dated relative to ``now``."""
    now = now or datetime.now(timezone.utc)
    return [
        {
            "id": "txn_1",
            "date": now - timedelta(days=2),
            "items": [
                {"product_id": "prod_1", "name": "Modern Laptop", "quantity": 1, "price": 1200},
                {"product_id": "prod_5", "name": "Wireless Headphones", "quantity": 1, "price": 150},
            ],
            "total_amount": 1350,
            "status": "Completed",
            "type": "sale",
        },
        {
            "id": "txn_2",
            "date": now - timedelta(days=5),
            "items": [{"product_id": "prod_3", "name": "Cotton T-Shirt", "quantity": 2, "price": 25}],
            "total_amount": 50,
            "status": "Completed",
            "type": "sale",
        },
        {
            "id": "txn_income_1",
            "date": now - timedelta(days=7),
            "items": [],
            "total_amount": 500,
            "status": "Completed",
            "type": "income",
            "description": "Consulting Services Rendered",
            "category": "Services",
        },
        {
            "id": "txn_expense_1",
            "date": now - timedelta(days=3),
            "items": [],
            "total_amount": -75,
            "status": "Completed",
            "type": "expense",
            "description": "Office Supplies Purchase",
            "category": "Office Expenses",
        },
    ]
