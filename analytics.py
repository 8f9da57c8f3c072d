"""
Admin dashboard figures computed from the order collection.
"""
from collections import OrderedDict
from datetime import timedelta
from typing import List

import database
from database import as_utc, utcnow

REPORT_WINDOW = timedelta(days=30)
OPEN_STATUSES = ["placed", "pending", "processing"]


def dashboard_metrics() -> dict:
    orders = database.db["order"]
    return {
        "totalOrders": orders.count_documents({}),
        "pendingOrders": orders.count_documents({"status": {"$in": OPEN_STATUSES}}),
        "deliveredOrders": orders.count_documents({"status": "delivered"}),
    }


def recent_orders(limit: int = 5) -> List[dict]:
    rows = []
    for order in database.get_documents("order", sort=[("createdAt", -1)], limit=limit):
        created = as_utc(order.get("createdAt"))
        rows.append({
            "id": str(order["_id"]),
            "customer": (order.get("shippingAddress") or {}).get("name"),
            "total": (order.get("totals") or {}).get("grandTotal"),
            "status": order.get("status"),
            "isPaid": order.get("isPaid", False),
            "date": created.isoformat() if created else None,
        })
    return rows


def sales_data(now=None) -> List[dict]:
    """Daily sales over the report window, cancelled orders excluded."""
    since = (now or utcnow()) - REPORT_WINDOW
    cursor = database.db["order"].find(
        {"createdAt": {"$gte": since}, "status": {"$ne": "cancelled"}},
        {"createdAt": 1, "totals.grandTotal": 1},
    ).sort("createdAt", 1)
    days = OrderedDict()
    for order in cursor:
        day = as_utc(order["createdAt"]).date().isoformat()
        bucket = days.setdefault(day, {"_id": day, "totalSales": 0, "count": 0})
        bucket["totalSales"] += (order.get("totals") or {}).get("grandTotal", 0)
        bucket["count"] += 1
    return list(days.values())


def most_ordered_products(now=None, limit: int = 10) -> List[dict]:
    since = (now or utcnow()) - REPORT_WINDOW
    pipeline = [
        {"$match": {"createdAt": {"$gte": since}}},
        {"$unwind": "$items"},
        {"$group": {"_id": "$items.product", "totalQuantity": {"$sum": "$items.quantity"}}},
        {"$match": {"_id": {"$ne": None}}},
        {"$sort": {"totalQuantity": -1}},
        {"$limit": limit},
    ]
    results = []
    for row in database.db["order"].aggregate(pipeline):
        product = database.db["product"].find_one({"_id": row["_id"]}, {"name": 1})
        if product is None:
            continue
        results.append({
            "productId": str(row["_id"]),
            "name": product.get("name"),
            "totalQuantity": row["totalQuantity"],
        })
    return results
