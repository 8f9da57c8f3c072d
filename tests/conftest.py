import mongomock
import pytest
from bson.objectid import ObjectId
from fastapi.testclient import TestClient

import database
import main
from auth import create_admin_token, create_user_token, hash_password
from schemas import Admin, Product, User
from tests.helpers import bearer, order_payload


@pytest.fixture
def db(monkeypatch):
    mock_db = mongomock.MongoClient()["herbie_test"]
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest.fixture
def client(db):
    return TestClient(main.app)


@pytest.fixture
def make_product(db):
    def _make(name="Chamomile Flowers", price=10, in_stock=5, **extra):
        product = Product(
            name=name,
            images=[f"/products/{name.lower().replace(' ', '-')}.jpg"],
            price=price,
            category=extra.pop("category", "Tea Herbs"),
            in_stock=in_stock,
            description=extra.pop("description", f"{name} description"),
            **extra,
        )
        return ObjectId(database.create_document("product", product))
    return _make


@pytest.fixture
def make_user(db):
    def _make(name="Ayesha Khan", email="ayesha@example.com", password="secret123", cart=None, **extra):
        user = User(name=name, email=email, password_hash=hash_password(password), **extra)
        user_id = database.create_document("user", user)
        if cart:
            db["user"].update_one(
                {"_id": ObjectId(user_id)},
                {"$set": {"cart": [{"product": pid, "quantity": qty} for pid, qty in cart]}},
            )
        return {"id": user_id, "headers": bearer(create_user_token(user_id))}
    return _make


@pytest.fixture
def admin(db):
    admin_doc = Admin(name="Store Admin", email="admin@herbie.com", password_hash=hash_password("admin123"))
    admin_id = database.create_document("admin", admin_doc)
    return {"id": admin_id, "headers": bearer(create_admin_token(admin_id))}


@pytest.fixture
def placed_order(client, db, make_product, make_user):
    """A user with one order for 2 x P1 (stock 5 -> 3), status set by the caller."""
    def _place(status="pending", quantity=2):
        product_id = make_product(in_stock=5)
        user = make_user(cart=[(product_id, quantity)])
        res = client.post(
            "/api/orders",
            json=order_payload([(product_id, "Chamomile Flowers", quantity, 10)]),
            headers=user["headers"],
        )
        assert res.status_code == 201, res.text
        order_id = res.json()["order"]["id"]
        if status != "placed":
            db["order"].update_one({"_id": ObjectId(order_id)}, {"$set": {"status": status}})
        return {"order_id": order_id, "product_id": product_id, "user": user}
    return _place
