"""
Order lifecycle: checkout validation, stock adjustment, status tracking and
the admin-side mutators.

Checkout and cancellation issue their writes one after another without a
transaction. A failure part-way leaves the earlier writes in place, and two
concurrent checkouts can both pass the stock check for the same product.
"""
import logging
import math
from datetime import timedelta
from typing import Any, Dict, List, Optional

from bson.objectid import ObjectId

import database
from database import as_utc, serialize_doc, to_object_id, utcnow
from schemas import (
    CANCELLABLE_STATUSES,
    ORDER_STATUSES,
    PAYMENT_METHODS,
    CamelModel,
    CardPayment,
    CodPayment,
    EasypaisaPayment,
    Order,
    OrderItem,
    PaymentDetails,
    ShippingAddress,
    Totals,
)

logger = logging.getLogger(__name__)

RETURN_WINDOW = timedelta(days=30)
PLACEHOLDER_IMAGE = "/products/placeholder.jpg"


class OrderError(Exception):
    """A client-side problem with an order request; maps to HTTP 400."""


class NotFoundError(Exception):
    """The order (or a referenced record) does not exist; maps to HTTP 404."""


# ----------------------- Request bodies -----------------------
class OrderItemBody(CamelModel):
    product_id: str
    name: str
    quantity: int
    price: float


class ShippingAddressBody(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    zip: Optional[str] = None


class PaymentDetailsBody(CamelModel):
    card_number: Optional[str] = None
    expiry: Optional[str] = None
    easypaisa_number: Optional[str] = None


# Checked in validate_totals.
class TotalsBody(CamelModel):
    subtotal: Any = None
    shipping: Any = None
    tax: Any = None
    grand_total: Any = None


class OrderCreateBody(CamelModel):
    items: List[OrderItemBody] = []
    shipping_address: Optional[ShippingAddressBody] = None
    payment_method: Optional[str] = None
    payment_details: Optional[PaymentDetailsBody] = None
    totals: Optional[TotalsBody] = None


class OrderUpdateBody(CamelModel):
    status: Optional[str] = None
    tracking_number: Optional[str] = None
    admin_notes: Optional[str] = None
    shipping_address: Optional[ShippingAddressBody] = None


class PaymentStatusBody(CamelModel):
    is_paid: bool


class DeliveryStatusBody(CamelModel):
    is_delivered: bool


# ----------------------- Validation -----------------------
def validate_shipping_address(address: Optional[ShippingAddressBody]) -> ShippingAddress:
    if address is None:
        raise OrderError("Complete shipping address is required")
    fields = {k: (v or "").strip() for k, v in address.model_dump().items()}
    if not all(fields.values()):
        raise OrderError("Complete shipping address is required")
    return ShippingAddress(**fields)


def validate_payment(method: Optional[str], details: Optional[PaymentDetailsBody]) -> PaymentDetails:
    if method not in PAYMENT_METHODS:
        raise OrderError("Invalid payment method")
    details = details or PaymentDetailsBody()
    if method == "card":
        if not details.card_number or not details.expiry:
            raise OrderError("Card details are required")
        return CardPayment(card_number=details.card_number.strip()[-4:], expiry=details.expiry.strip())
    if method == "easypaisa":
        if not details.easypaisa_number:
            raise OrderError("Easypaisa number is required")
        return EasypaisaPayment(easypaisa_number=details.easypaisa_number.strip())
    return CodPayment()


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_totals(totals: Optional[TotalsBody]) -> Totals:
    values = totals.model_dump() if totals else {}
    if len(values) != 4 or not all(_is_finite_number(v) for v in values.values()):
        raise OrderError("Valid totals are required")
    if any(v < 0 for v in values.values()):
        raise OrderError("Totals cannot be negative")
    return Totals(**values)


def check_items_against_cart(user_id: ObjectId, items: List[OrderItemBody]) -> None:
    """Compare the submitted items with the persisted cart and live products."""
    user = database.db["user"].find_one({"_id": user_id}, {"cart": 1})
    cart = (user or {}).get("cart") or []
    if not cart:
        raise OrderError("Cart is empty")
    cart_by_product = {str(entry["product"]): entry for entry in cart}
    seen = set()

    for item in items:
        product_id = to_object_id(item.product_id)
        if product_id is None:
            raise OrderError(f"Invalid product ID: {item.product_id}")
        if product_id in seen:
            raise OrderError(f"Duplicate item: {item.name}")
        seen.add(product_id)
        cart_item = cart_by_product.get(str(product_id))
        if cart_item is None:
            raise OrderError(f"Product not in cart: {item.name}")
        product = database.db["product"].find_one({"_id": product_id}, {"name": 1, "price": 1, "inStock": 1})
        if product is None:
            raise OrderError(f"Product not found: {item.name}")
        if cart_item.get("quantity") != item.quantity:
            raise OrderError(
                f"Quantity mismatch for {item.name}. Cart: {cart_item.get('quantity')}, Provided: {item.quantity}"
            )
        if product.get("name") != item.name or product.get("price") != item.price:
            raise OrderError(f"Product details mismatch for {item.name}")
        available = product.get("inStock", 0)
        if available < item.quantity:
            raise OrderError(f"Insufficient stock for {item.name}. Available: {available}")


# ----------------------- Checkout -----------------------
def create_order(user_id: str, body: OrderCreateBody) -> dict:
    if not body.items:
        raise OrderError("Cart items are required")
    address = validate_shipping_address(body.shipping_address)
    payment = validate_payment(body.payment_method, body.payment_details)
    totals = validate_totals(body.totals)

    uid = to_object_id(user_id)
    check_items_against_cart(uid, body.items)

    order = Order(
        user=uid,
        items=[
            OrderItem(product=ObjectId(i.product_id), name=i.name.strip(), quantity=i.quantity, price=i.price)
            for i in body.items
        ],
        shipping_address=address,
        payment_method=payment.method,
        payment_details=payment.model_dump(by_alias=True, exclude={"method"}),
        totals=totals,
        status="placed",
    )
    order_id = database.create_document("order", order)

    for item in order.items:
        database.db["product"].update_one({"_id": item.product}, {"$inc": {"inStock": -item.quantity}})

    database.db["user"].update_one({"_id": uid}, {"$set": {"cart": [], "updatedAt": utcnow()}})

    logger.info("Order %s placed by user %s (%d items)", order_id, user_id, len(order.items))
    return serialize_doc(database.db["order"].find_one({"_id": ObjectId(order_id)}))


# ----------------------- Lookups -----------------------
def _order_id(order_id: str) -> ObjectId:
    oid = to_object_id(order_id)
    if oid is None:
        raise OrderError("Invalid order ID")
    return oid


def get_order(order_id: str) -> dict:
    order = database.db["order"].find_one({"_id": _order_id(order_id)})
    if not order:
        raise NotFoundError("Order not found")
    return order


def list_orders(filter_dict: Optional[dict] = None) -> List[dict]:
    return database.get_documents("order", filter_dict, sort=[("createdAt", -1)])


def _products_for(orders: List[dict]) -> Dict[ObjectId, dict]:
    ids = {item["product"] for order in orders for item in order.get("items", []) if item.get("product")}
    if not ids:
        return {}
    cursor = database.db["product"].find({"_id": {"$in": list(ids)}}, {"name": 1, "price": 1, "images": 1})
    return {p["_id"]: p for p in cursor}


# ----------------------- Cancellation -----------------------
def cancel_order(user_id: str, order_id: str) -> None:
    oid = _order_id(order_id)
    order = database.db["order"].find_one({"_id": oid, "user": to_object_id(user_id)})
    if not order:
        raise NotFoundError("Order not found")
    if order.get("status") not in CANCELLABLE_STATUSES:
        raise OrderError("Order cannot be cancelled")

    database.db["order"].update_one({"_id": oid}, {"$set": {"status": "cancelled", "updatedAt": utcnow()}})

    for item in order.get("items", []):
        database.db["product"].update_one({"_id": item["product"]}, {"$inc": {"inStock": item["quantity"]}})

    logger.info("Order %s cancelled by user %s, stock restored", order_id, user_id)


# ----------------------- Admin mutators -----------------------
def update_order(order_id: str, body: OrderUpdateBody) -> dict:
    order = get_order(order_id)
    if body.status and body.status not in ORDER_STATUSES:
        raise OrderError("Invalid status")

    now = utcnow()
    update: dict = {"$set": {"updatedAt": now}}
    if body.status and body.status != order.get("status"):
        update["$set"]["status"] = body.status
        update["$push"] = {"statusHistory": {"status": body.status, "timestamp": now}}
        logger.info("Order %s status %s -> %s", order_id, order.get("status"), body.status)
    if body.tracking_number is not None:
        update["$set"]["trackingNumber"] = body.tracking_number
    if body.admin_notes is not None:
        update["$set"]["adminNotes"] = body.admin_notes
    if body.shipping_address is not None:
        merged = dict(order.get("shippingAddress") or {})
        merged.update(body.shipping_address.model_dump(by_alias=True, exclude_none=True))
        update["$set"]["shippingAddress"] = merged

    database.db["order"].update_one({"_id": order["_id"]}, update)
    return serialize_doc(database.db["order"].find_one({"_id": order["_id"]}))


def set_payment_status(order_id: str, is_paid: bool) -> dict:
    order = get_order(order_id)
    now = utcnow()
    stamp = "paymentDetails.paidAt" if is_paid else "paymentDetails.unpaidAt"
    database.db["order"].update_one(
        {"_id": order["_id"]},
        {"$set": {"isPaid": is_paid, stamp: now, "updatedAt": now}},
    )
    logger.info("Order %s marked %s", order_id, "paid" if is_paid else "unpaid")
    return serialize_doc(database.db["order"].find_one({"_id": order["_id"]}))


def delivery_status_for(is_delivered: bool) -> str:
    return "Delivered" if is_delivered else "In Transit"


def set_delivery_status(order_id: str, is_delivered: bool) -> dict:
    order = get_order(order_id)
    now = utcnow()
    changes = {
        "isDelivered": is_delivered,
        "deliveryStatus": delivery_status_for(is_delivered),
        "deliveryDate": now if is_delivered else None,
        "updatedAt": now,
    }
    database.db["order"].update_one({"_id": order["_id"]}, {"$set": changes})
    logger.info("Order %s delivery status set to %s", order_id, changes["deliveryStatus"])
    return serialize_doc(database.db["order"].find_one({"_id": order["_id"]}))


def delete_order(order_id: str) -> None:
    """Hard delete. Stock is not restored."""
    res = database.db["order"].delete_one({"_id": _order_id(order_id)})
    if res.deleted_count == 0:
        raise NotFoundError("Order not found")
    logger.warning("Order %s deleted", order_id)


# ----------------------- Display -----------------------
def _date_only(value) -> Optional[str]:
    value = as_utc(value)
    return value.date().isoformat() if value else None


def format_payment_method(order: dict) -> str:
    details = order.get("paymentDetails") or {}
    method = order.get("paymentMethod")
    if method == "card":
        return f"Card •••• {details.get('cardNumber') or 'XXXX'}"
    if method == "easypaisa":
        number = details.get("easypaisaNumber") or ""
        return f"Easypaisa •••• {number[-4:] or 'XXXX'}"
    return "Cash on Delivery"


def pluralize_items(count: int) -> str:
    return f"{count} item" if count == 1 else f"{count} items"


def is_return_eligible(order: dict, now=None) -> bool:
    if order.get("status") != "delivered":
        return False
    delivered_at = as_utc(order.get("deliveryDate"))
    if delivered_at is None:
        return False
    return delivered_at > (now or utcnow()) - RETURN_WINDOW


def format_user_order(order: dict, products: Dict[ObjectId, dict]) -> dict:
    status = (order.get("status") or "").capitalize()
    quantity = sum(item.get("quantity", 0) for item in order.get("items", []))
    address = order.get("shippingAddress") or {}
    eligible = is_return_eligible(order)
    return {
        "id": str(order["_id"]),
        "date": _date_only(order.get("createdAt")),
        "status": status,
        "items": quantity,
        "itemsLabel": pluralize_items(quantity),
        "total": (order.get("totals") or {}).get("grandTotal"),
        "deliveryDate": _date_only(order.get("deliveryDate")),
        "trackingNumber": order.get("trackingNumber"),
        "paymentMethod": format_payment_method(order),
        "shippingAddress": (
            f"{address.get('address', '')}, {address.get('city', '')}, "
            f"{address.get('country', '')} {address.get('zip', '')}"
        ),
        "itemsDetails": [
            {
                "id": str(item.get("_id")),
                "product": str(item["product"]) if item.get("product") else None,
                "name": item.get("name"),
                "image": ((products.get(item.get("product")) or {}).get("images") or [PLACEHOLDER_IMAGE])[0],
                "price": item.get("price"),
                "quantity": item.get("quantity"),
                "status": status,
                "returnEligible": eligible,
            }
            for item in order.get("items", [])
        ],
    }


def user_orders(user_id: str) -> List[dict]:
    orders = list_orders({"user": to_object_id(user_id)})
    products = _products_for(orders)
    return [format_user_order(o, products) for o in orders]


def format_admin_order(order: dict, products: Dict[ObjectId, dict]) -> dict:
    items = []
    for item in order.get("items", []):
        product = products.get(item.get("product")) or {}
        items.append({
            "id": str(item.get("_id")),
            "product": str(item["product"]) if product else None,
            "name": product.get("name") or item.get("name"),
            "image": (product.get("images") or [PLACEHOLDER_IMAGE])[0],
            "price": item.get("price"),
            "quantity": item.get("quantity"),
            "status": order.get("status"),
        })
    data = serialize_doc({k: v for k, v in order.items() if k != "items"})
    data["items"] = items
    data.setdefault("statusHistory", [])
    data.setdefault("trackingNumber", None)
    return data


def admin_order_view(order_id: str) -> dict:
    order = get_order(order_id)
    return format_admin_order(order, _products_for([order]))
