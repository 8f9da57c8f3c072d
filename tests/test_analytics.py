from datetime import datetime, timedelta, timezone

from bson.objectid import ObjectId

import analytics


def _insert_order(db, status, created, items, grand_total):
    db["order"].insert_one({
        "user": ObjectId(),
        "items": [{"_id": ObjectId(), "product": pid, "name": "x", "quantity": qty, "price": 1} for pid, qty in items],
        "status": status,
        "totals": {"subtotal": grand_total, "shipping": 0, "tax": 0, "grandTotal": grand_total},
        "shippingAddress": {"name": "Buyer"},
        "createdAt": created,
    })


def test_dashboard_metrics(client, db, admin):
    now = datetime.now(timezone.utc)
    for status in ["placed", "pending", "processing", "delivered", "cancelled"]:
        _insert_order(db, status, now, [], 10)

    res = client.get("/api/admin/dashboard", headers=admin["headers"])

    assert res.json() == {"totalOrders": 5, "pendingOrders": 3, "deliveredOrders": 1}


def test_sales_data_groups_by_day(db):
    now = datetime(2025, 6, 30, 12, tzinfo=timezone.utc)
    _insert_order(db, "placed", now - timedelta(days=1), [], 100)
    _insert_order(db, "delivered", now - timedelta(days=1, hours=2), [], 50)
    _insert_order(db, "placed", now - timedelta(days=3), [], 20)
    _insert_order(db, "cancelled", now - timedelta(days=1), [], 999)
    _insert_order(db, "placed", now - timedelta(days=45), [], 999)

    rows = analytics.sales_data(now=now)

    assert rows == [
        {"_id": "2025-06-27", "totalSales": 20, "count": 1},
        {"_id": "2025-06-29", "totalSales": 150, "count": 2},
    ]


def test_recent_orders(client, db, admin):
    now = datetime.now(timezone.utc)
    for i in range(7):
        _insert_order(db, "placed", now - timedelta(minutes=i), [], i)

    rows = client.get("/api/admin/orders/recent", headers=admin["headers"]).json()

    assert [r["total"] for r in rows] == [0, 1, 2, 3, 4]
    assert rows[0]["customer"] == "Buyer"


def test_most_ordered_products(client, db, admin, make_product):
    now = datetime.now(timezone.utc)
    tea = make_product(name="Chamomile Flowers")
    mint = make_product(name="Dried Mint", category="Culinary Herbs")
    _insert_order(db, "placed", now, [(tea, 1), (mint, 4)], 10)
    _insert_order(db, "delivered", now, [(tea, 2)], 10)
    _insert_order(db, "placed", now - timedelta(days=60), [(tea, 50)], 10)
    _insert_order(db, "placed", now, [(ObjectId(), 9)], 10)

    res = client.get("/api/analytics", headers=admin["headers"])

    assert res.json()["mostOrderedProducts"] == [
        {"productId": str(mint), "name": "Dried Mint", "totalQuantity": 4},
        {"productId": str(tea), "name": "Chamomile Flowers", "totalQuantity": 3},
    ]


def test_most_ordered_products_empty(client, db, admin):
    res = client.get("/api/analytics", headers=admin["headers"])
    assert res.json() == {"mostOrderedProducts": [{"message": "No products ordered in the last 30 days"}]}
