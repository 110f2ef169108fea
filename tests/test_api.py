"""End-to-end tests through the HTTP API, each against a freshly seeded store."""


def stock(client, product_id):
    return client.get(f"/api/products/{product_id}").json()["stock"]


def test_root_and_status(client):
    assert client.get("/").status_code == 200
    info = client.get("/test").json()
    assert info["products"] == 10
    assert info["transactions"] == 4


def test_order_scenario(client):
    res = client.post("/api/orders", json={"lines": [{"product_id": "prod_1", "quantity": 3}]})
    assert res.status_code == 201
    order = res.json()
    assert order["total_amount"] == 3600
    assert stock(client, "prod_1") == 7

    item = {"product_id": "prod_1", "name": "Modern Laptop", "price": 1200}
    res = client.put(f"/api/orders/{order['id']}", json={"items": [{**item, "quantity": 5}]})
    assert res.status_code == 200
    assert res.json()["total_amount"] == 6000
    assert stock(client, "prod_1") == 5

    res = client.put(f"/api/orders/{order['id']}", json={"items": [{**item, "quantity": 20}]})
    assert res.status_code == 409
    detail = res.json()["detail"]
    assert detail["code"] == "INSUFFICIENT_STOCK"
    assert (detail["product_id"], detail["available"], detail["requested"]) == ("prod_1", 10, 20)
    assert stock(client, "prod_1") == 5

    assert client.delete(f"/api/orders/{order['id']}").status_code == 200
    assert stock(client, "prod_1") == 10


def test_edit_drops_zero_lines_and_rejects_empty(client):
    items = [
        {"product_id": "prod_1", "name": "Modern Laptop", "quantity": 1, "price": 1200},
        {"product_id": "prod_5", "name": "Wireless Headphones", "quantity": 0, "price": 150},
    ]
    res = client.put("/api/orders/txn_1", json={"items": items})
    assert res.status_code == 200
    assert [i["product_id"] for i in res.json()["items"]] == ["prod_1"]
    assert stock(client, "prod_5") == 31

    res = client.put("/api/orders/txn_1", json={"items": [{**items[0], "quantity": 0}]})
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "EMPTY_RESULT"


def test_edit_and_delete_errors(client):
    item = {"product_id": "prod_1", "name": "Modern Laptop", "quantity": 1, "price": 1200}
    res = client.put("/api/orders/txn_income_1", json={"items": [item]})
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "WRONG_TYPE"

    res = client.put("/api/orders/unknown", json={"items": [item]})
    assert res.status_code == 404
    assert res.json()["detail"]["code"] == "NOT_FOUND"

    res = client.put("/api/orders/txn_1", json={"items": [{**item, "product_id": "prod_404"}]})
    assert res.status_code == 404
    assert res.json()["detail"]["code"] == "PRODUCT_NOT_FOUND"

    res = client.delete("/api/orders/txn_expense_1")
    assert res.status_code == 400


def test_place_order_errors(client):
    res = client.post("/api/orders", json={"lines": []})
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "EMPTY_CART"

    res = client.post("/api/orders", json={"lines": [{"product_id": "prod_4", "quantity": 16}]})
    assert res.status_code == 409
    assert stock(client, "prod_4") == 15


def test_cart_and_checkout(client):
    client.post("/api/cart/items", json={"product_id": "prod_2", "quantity": 2})
    client.post("/api/cart/items", json={"product_id": "prod_6", "quantity": 1})
    cart = client.post("/api/cart/items", json={"product_id": "prod_2", "quantity": 1}).json()
    assert cart["count"] == 4
    assert cart["total"] == 100

    cart = client.put("/api/cart/items/prod_6", json={"quantity": 0}).json()
    assert cart["count"] == 3

    res = client.post("/api/checkout", json={"name": "Ana", "address": "1 Main St", "email": "ana@example.com"})
    assert res.status_code == 201
    order = res.json()
    assert order["description"] == "Order by Ana"
    assert order["total_amount"] == 60
    assert stock(client, "prod_2") == 47
    assert client.get("/api/cart").json()["items"] == []


def test_checkout_empty_cart(client):
    res = client.post("/api/checkout", json={"name": "Ana", "address": "1 Main St", "email": "a@b.c"})
    assert res.status_code == 400


def test_checkout_requires_customer_details(client):
    client.post("/api/cart/items", json={"product_id": "prod_2"})
    res = client.post("/api/checkout", json={"name": "", "address": "1 Main St", "email": "a@b.c"})
    assert res.status_code == 422
    assert client.get("/api/cart").json()["count"] == 1


def test_add_out_of_stock_to_cart(client):
    client.put("/api/products/prod_4", json={"stock": 0})
    res = client.post("/api/cart/items", json={"product_id": "prod_4"})
    assert res.status_code == 409


def test_product_admin(client):
    res = client.post("/api/products", json={"name": "Mug", "price": 8, "category": "Kitchen", "stock": 4})
    assert res.status_code == 201
    pid = res.json()["id"]

    res = client.put(f"/api/products/{pid}", json={"price": 9})
    assert res.json()["price"] == 9
    assert res.json()["name"] == "Mug"

    assert client.post(f"/api/products/{pid}/restock", json={"quantity": 6}).json()["stock"] == 10
    assert "Kitchen" in client.get("/api/categories").json()
    assert [p["id"] for p in client.get("/api/products", params={"category": "Kitchen"}).json()] == [pid]

    assert client.delete(f"/api/products/{pid}").status_code == 200
    assert client.get(f"/api/products/{pid}").status_code == 404


def test_product_validation(client):
    res = client.post("/api/products", json={"name": "Free", "price": 0, "category": "Misc"})
    assert res.status_code == 422
    assert client.put("/api/products/prod_1", json={"stock": -1}).status_code == 422


def test_import_products(client):
    rows = [
        {"name": "Notebook", "price": 3.5, "stock": 20, "description": "A5 lined"},
        {"name": "", "price": 1, "stock": 1},
        {"name": "Pen", "price": -1, "stock": 5},
        {"name": "Eraser", "price": 0.5, "stock": -2},
    ]
    res = client.post("/api/products/import", json=rows)
    assert res.status_code == 200
    body = res.json()
    assert [p["name"] for p in body["added"]] == ["Notebook"]
    assert body["added"][0]["category"] == "Uncategorized"
    assert body["added"][0]["data_ai_hint"] == "product placeholder"
    assert [s["row"] for s in body["skipped"]] == [2, 3, 4]


def test_import_with_no_valid_rows(client):
    res = client.post("/api/products/import", json=[{"name": " "}])
    assert res.status_code == 400


def test_manual_records_and_report(client):
    report = client.get("/api/reports/financial").json()
    assert report["summary"] == {
        "total_income": 1900,
        "total_expenses": 75,
        "net_profit": 1825,
        "period": "All Time",
    }

    res = client.post("/api/transactions", json={
        "type": "expense", "amount": 25, "description": "Courier", "category": "Shipping",
    })
    assert res.status_code == 201
    assert res.json()["total_amount"] == -25

    res = client.post("/api/transactions", json={
        "type": "income", "amount": -3, "description": "Tip", "category": "Other",
    })
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "VALIDATION_ERROR"

    summary = client.get("/api/reports/financial").json()["summary"]
    assert summary["total_expenses"] == 100
    assert summary["net_profit"] == 1800


def test_order_history_lists_sales_only(client):
    orders = client.get("/api/orders").json()
    assert [o["id"] for o in orders] == ["txn_1", "txn_2"]
    expenses = client.get("/api/transactions", params={"type": "expense"}).json()
    assert [t["id"] for t in expenses] == ["txn_expense_1"]


def test_stats(client):
    client.put("/api/products/prod_10", json={"stock": 2})
    stats = client.get("/api/stats").json()
    assert stats["counts"]["orders"] == 2
    assert stats["total_sales"] == 1400
    assert stats["net_profit"] == 1825
    assert [p["id"] for p in stats["low_stock"]] == ["prod_10"]


def test_reset(client):
    client.post("/api/orders", json={"lines": [{"product_id": "prod_1", "quantity": 1}]})
    client.post("/api/reset")
    assert stock(client, "prod_1") == 10
    assert len(client.get("/api/orders").json()) == 2


def test_import_skips_unparseable_rows(client):
    rows = [
        {"name": "Good", "price": 3, "stock": 1},
        {"name": "Priced", "price": "Rp 1200", "stock": "7"},
        {"name": "NoDigits", "price": "free", "stock": 2},
        {"name": "Half", "price": 4, "stock": 2.5},
        {"name": "Words", "price": 4, "stock": "lots"},
    ]
    res = client.post("/api/products/import", json=rows)
    assert res.status_code == 200
    body = res.json()
    assert [(p["name"], p["price"], p["stock"]) for p in body["added"]] == [("Good", 3, 1), ("Priced", 1200, 7)]
    assert [s["row"] for s in body["skipped"]] == [3, 4, 5]
    assert body["skipped"][0]["reason"] == "Invalid price for NoDigits"
    assert body["skipped"][1]["reason"] == "Invalid stock quantity for Half"


def test_checkout_charges_cart_price(client):
    cart = client.post("/api/cart/items", json={"product_id": "prod_2", "quantity": 2}).json()
    assert cart["total"] == 40
    client.put("/api/products/prod_2", json={"price": 99})

    order = client.post("/api/checkout", json={"name": "Ana", "address": "1 Main St", "email": "a@b.c"}).json()
    assert order["total_amount"] == cart["total"]
    assert order["items"][0]["price"] == 20
    assert stock(client, "prod_2") == 48


def test_cart_quantity_follows_restock(client):
    client.put("/api/products/prod_4", json={"stock": 2})
    client.post("/api/cart/items", json={"product_id": "prod_4", "quantity": 2})
    client.post("/api/products/prod_4/restock", json={"quantity": 3})
    cart = client.put("/api/cart/items/prod_4", json={"quantity": 4}).json()
    assert cart["count"] == 4


def test_reset_respects_empty_start(client, monkeypatch):
    monkeypatch.setenv("SEED_DATA", "0")
    client.post("/api/reset")
    assert client.get("/api/products").json() == []
    assert client.get("/api/transactions").json() == []


def test_created_product_gets_placeholder_image(client):
    res = client.post("/api/products", json={"name": "Mug", "price": 8, "category": "Kitchen"})
    assert res.json()["image_url"] == "https://placehold.co/600x400.png"
