import logging
import os
import re
import traceback
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field, ValidationError

import analytics
import database
import orders
import reviews
from auth import (
    consume_email_verification,
    consume_password_reset,
    create_admin_token,
    create_user_token,
    get_current_admin,
    get_current_user,
    hash_password,
    issue_email_verification,
    issue_password_reset,
    public_account,
    verify_password,
)
from database import create_document, serialize_doc, to_object_id, utcnow
from orders import (
    DeliveryStatusBody,
    NotFoundError,
    OrderCreateBody,
    OrderError,
    OrderUpdateBody,
    PaymentStatusBody,
)
from reviews import ReviewCreateBody
from schemas import (
    Admin as AdminSchema,
    CamelModel,
    Category as CategorySchema,
    Faq as FaqSchema,
    Product as ProductSchema,
    ProductCategory,
    User as UserSchema,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

APP_ENV = os.getenv("APP_ENV", "development")
FRONT_END_URL = os.getenv("FRONT_END_URL")
ADMIN_URL = os.getenv("ADMIN_URL")

app = FastAPI(title="Herbie Store API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[u for u in (FRONT_END_URL, ADMIN_URL) if u] or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------- Errors -----------------------
@app.exception_handler(OrderError)
async def order_error_handler(request: Request, exc: OrderError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = {"detail": "Internal server error"}
    if APP_ENV != "production":
        content["trace"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return JSONResponse(status_code=500, content=content)


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ()))
    return f"{field}: {err.get('msg')}" if field else err.get("msg", "Invalid input")


def _object_id(value: str, label: str):
    oid = to_object_id(value)
    if oid is None:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID")
    return oid


# ----------------------- Models -----------------------
class SignupBody(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginBody(BaseModel):
    email: EmailStr
    password: str


class EmailBody(BaseModel):
    email: EmailStr


class NewPasswordBody(BaseModel):
    password: str = Field(..., min_length=6)


class ChangePasswordBody(CamelModel):
    current_password: str
    new_password: str


class ProfileUpdateBody(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    location: Optional[str] = None
    bio: Optional[str] = None


class AdminCreateBody(BaseModel):
    name: str
    email: EmailStr
    password: str = Field(..., min_length=6)
    address: str = ""
    phone: str = ""
    image: str = ""
    bio: str = ""


class AdminUpdateBody(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    address: Optional[str] = None
    phone: Optional[str] = None
    image: Optional[str] = None
    bio: Optional[str] = None


class ProductCreateBody(ProductSchema):
    pass


class ProductUpdateBody(CamelModel):
    name: Optional[str] = None
    images: Optional[List[str]] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    category: Optional[ProductCategory] = None
    in_stock: Optional[int] = Field(None, ge=0)
    is_organic: Optional[bool] = None
    description: Optional[str] = None
    is_featured: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    is_new_arrival: Optional[bool] = None


class CategoryCreateBody(CategorySchema):
    pass


class FaqCreateBody(BaseModel):
    question: Optional[str] = None
    answer: Optional[str] = None


class CartItemBody(CamelModel):
    product_id: str
    quantity: int = 1


class CartRemoveBody(CamelModel):
    product_id: Optional[str] = None


class CartUpdateBody(CamelModel):
    product_id: Optional[str] = None
    quantity: Optional[int] = None


# ----------------------- Health -----------------------
@app.get("/")
def root():
    return {"message": "Herbie API running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        if database.db is not None:
            response["database"] = "✅ Connected & Working"
            response["connection_status"] = "Connected"
            response["collections"] = database.db.list_collection_names()[:10]
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# ----------------------- User auth -----------------------
@app.post("/api/auth/register", status_code=201)
def register(body: SignupBody):
    if database.db["user"].find_one({"email": body.email}):
        raise HTTPException(status_code=400, detail="User already exists")
    user = UserSchema(name=body.name, email=body.email, password_hash=hash_password(body.password))
    user_id = create_document("user", user)
    token = issue_email_verification({"_id": to_object_id(user_id)})
    logger.info("Registered user %s, verification link %s/verify-email/%s", user_id, FRONT_END_URL or "", token)
    return {"message": "Registered successfully"}


@app.get("/api/auth/verify-email/{token}")
def verify_email(token: str):
    if not consume_email_verification(token):
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")
    return {"message": "Email verified successfully"}


@app.post("/api/auth/resend-verification")
def resend_verification(body: EmailBody):
    user = database.db["user"].find_one({"email": body.email})
    if not user:
        raise HTTPException(status_code=404, detail="No user found with this email")
    if user.get("isVerified"):
        raise HTTPException(status_code=400, detail="Email already verified")
    token = issue_email_verification(user)
    logger.info("Verification link for user %s: %s/verify-email/%s", user["_id"], FRONT_END_URL or "", token)
    return {"message": "Verification email sent"}


@app.post("/api/auth/login")
def login(body: LoginBody):
    user = database.db["user"].find_one({"email": body.email})
    if user and user.get("isGoogleUser"):
        raise HTTPException(status_code=403, detail="Please log in using Google authentication")
    if not user or not verify_password(body.password, user.get("passwordHash")):
        logger.warning("Failed login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return {"message": "Login successful", "token": create_user_token(str(user["_id"])), "user": public_account(user)}


@app.get("/api/auth/get-user")
def get_user(user=Depends(get_current_user)):
    cart_ids = [to_object_id(c.get("product")) for c in user.get("cart", [])]
    products = {
        str(p["_id"]): serialize_doc(p)
        for p in database.db["product"].find({"_id": {"$in": cart_ids}}, {"name": 1, "price": 1, "images": 1})
    }
    user["cart"] = [{**c, "product": products.get(c.get("product"))} for c in user.get("cart", [])]
    return {"user": user}


@app.post("/api/auth/forgot-password")
def user_forgot_password(body: EmailBody):
    user = database.db["user"].find_one({"email": body.email})
    if not user:
        raise HTTPException(status_code=404, detail="No user found with this email")
    if user.get("isGoogleUser"):
        raise HTTPException(status_code=403, detail="You cannot reset your password because you logged in with Google")
    token = issue_password_reset("user", user)
    logger.info("Password reset link for user %s: %s/reset-password/%s", user["_id"], FRONT_END_URL or "", token)
    return {"message": "Password reset email sent"}


@app.post("/api/auth/reset-password/{token}")
def user_reset_password(token: str, body: NewPasswordBody):
    if not consume_password_reset("user", token, body.password):
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")
    return {"message": "Password reset successful"}


# ----------------------- User profile -----------------------
@app.get("/api/users/profile")
def get_profile(user=Depends(get_current_user)):
    return user


@app.put("/api/users/profile")
def update_profile(body: ProfileUpdateBody, user=Depends(get_current_user)):
    update = body.model_dump(exclude_none=True)
    if "email" in update and database.db["user"].find_one(
        {"email": update["email"], "_id": {"$ne": to_object_id(user["id"])}}
    ):
        raise HTTPException(status_code=400, detail="Email already in use")
    update["updatedAt"] = utcnow()
    database.db["user"].update_one({"_id": to_object_id(user["id"])}, {"$set": update})
    return public_account(database.db["user"].find_one({"_id": to_object_id(user["id"])}))


@app.put("/api/users/profile/password")
def change_user_password(body: ChangePasswordBody, user=Depends(get_current_user)):
    if len(body.new_password) < 8:
        raise HTTPException(status_code=400, detail="New password must be at least 8 characters")
    stored = database.db["user"].find_one({"_id": to_object_id(user["id"])})
    if not verify_password(body.current_password, stored.get("passwordHash")):
        raise HTTPException(status_code=401, detail="Current password is incorrect")
    database.db["user"].update_one(
        {"_id": stored["_id"]},
        {"$set": {"passwordHash": hash_password(body.new_password), "updatedAt": utcnow()}},
    )
    return {"message": "Password changed successfully"}


# ----------------------- Admin accounts -----------------------
@app.post("/api/admins/login")
def admin_login(body: LoginBody):
    admin = database.db["admin"].find_one({"email": body.email.lower()})
    if not admin or not verify_password(body.password, admin.get("passwordHash")):
        logger.warning("Failed admin login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return {"message": "Login successful", "token": create_admin_token(str(admin["_id"])), "admin": public_account(admin)}


@app.post("/api/admins/forgot-password")
def admin_forgot_password(body: EmailBody):
    admin = database.db["admin"].find_one({"email": body.email.lower()})
    if not admin:
        raise HTTPException(status_code=404, detail="No admin found with this email")
    token = issue_password_reset("admin", admin)
    logger.info("Password reset link for admin %s: %s/reset-password/%s", admin["_id"], ADMIN_URL or "", token)
    return {"message": "Password reset email sent"}


@app.post("/api/admins/reset-password/{token}")
def admin_reset_password(token: str, body: NewPasswordBody):
    if not consume_password_reset("admin", token, body.password):
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")
    return {"message": "Password reset successful"}


@app.get("/api/admins/get-admin")
def current_admin(admin=Depends(get_current_admin)):
    return admin


@app.put("/api/admins/change-password")
def change_admin_password(body: ChangePasswordBody, admin=Depends(get_current_admin)):
    if len(body.new_password) < 6:
        raise HTTPException(status_code=400, detail="New password must be at least 6 characters")
    stored = database.db["admin"].find_one({"_id": to_object_id(admin["id"])})
    if not verify_password(body.current_password, stored.get("passwordHash")):
        raise HTTPException(status_code=401, detail="Current password is incorrect")
    database.db["admin"].update_one(
        {"_id": stored["_id"]},
        {"$set": {"passwordHash": hash_password(body.new_password), "updatedAt": utcnow()}},
    )
    return {"message": "Password changed successfully"}


@app.get("/api/admins")
def list_admins(admin=Depends(get_current_admin)):
    return [public_account(a) for a in database.get_documents("admin", sort=[("createdAt", -1)])]


@app.post("/api/admins", status_code=201)
def add_admin(body: AdminCreateBody, admin=Depends(get_current_admin)):
    email = body.email.lower()
    if database.db["admin"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="Admin already exists")
    new_admin = AdminSchema(
        name=body.name,
        email=email,
        password_hash=hash_password(body.password),
        address=body.address,
        phone=body.phone,
        image=body.image,
        bio=body.bio,
    )
    admin_id = create_document("admin", new_admin)
    logger.info("Admin %s created by %s", admin_id, admin["id"])
    return {"message": "Admin created", "admin": public_account(database.db["admin"].find_one({"_id": to_object_id(admin_id)}))}


@app.get("/api/admins/{admin_id}")
def get_admin(admin_id: str, admin=Depends(get_current_admin)):
    found = database.db["admin"].find_one({"_id": _object_id(admin_id, "admin")})
    if not found:
        raise HTTPException(status_code=404, detail="Admin not found")
    return public_account(found)


@app.put("/api/admins/{admin_id}")
def update_admin(admin_id: str, body: AdminUpdateBody, admin=Depends(get_current_admin)):
    oid = _object_id(admin_id, "admin")
    update = body.model_dump(exclude_none=True)
    if "password" in update:
        update["passwordHash"] = hash_password(update.pop("password"))
    if "email" in update:
        update["email"] = update["email"].lower()
        if database.db["admin"].find_one({"email": update["email"], "_id": {"$ne": oid}}):
            raise HTTPException(status_code=400, detail="Admin already exists")
    update["updatedAt"] = utcnow()
    res = database.db["admin"].update_one({"_id": oid}, {"$set": update})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Admin not found")
    return {"message": "Admin updated", "admin": public_account(database.db["admin"].find_one({"_id": oid}))}


@app.delete("/api/admins/{admin_id}")
def delete_admin(admin_id: str, admin=Depends(get_current_admin)):
    res = database.db["admin"].delete_one({"_id": _object_id(admin_id, "admin")})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Admin not found")
    logger.warning("Admin %s deleted by %s", admin_id, admin["id"])
    return {"message": "Admin deleted successfully"}


# ----------------------- Products -----------------------
@app.get("/api/products")
def list_products(q: Optional[str] = None, category: Optional[str] = None):
    filt = {}
    if q:
        filt["name"] = {"$regex": re.escape(q), "$options": "i"}
    if category:
        filt["category"] = category
    return [serialize_doc(p) for p in database.get_documents("product", filt, sort=[("createdAt", -1)])]


@app.get("/api/products/{product_id}")
def get_product(product_id: str):
    item = database.db["product"].find_one({"_id": _object_id(product_id, "product")})
    if not item:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_doc(item)


@app.post("/api/products", status_code=201)
def create_product(body: ProductCreateBody, admin=Depends(get_current_admin)):
    pid = create_document("product", body)
    return serialize_doc(database.db["product"].find_one({"_id": to_object_id(pid)}))


@app.put("/api/products/{product_id}")
def update_product(product_id: str, body: ProductUpdateBody, admin=Depends(get_current_admin)):
    oid = _object_id(product_id, "product")
    update = body.model_dump(by_alias=True, exclude_none=True)
    update["updatedAt"] = utcnow()
    res = database.db["product"].update_one({"_id": oid}, {"$set": update})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_doc(database.db["product"].find_one({"_id": oid}))


@app.delete("/api/products/{product_id}")
def delete_product(product_id: str, admin=Depends(get_current_admin)):
    res = database.db["product"].delete_one({"_id": _object_id(product_id, "product")})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product deleted successfully"}


# ----------------------- Categories -----------------------
@app.get("/api/categories")
def list_categories():
    return [serialize_doc(c) for c in database.get_documents("category", sort=[("createdAt", -1)])]


@app.post("/api/categories", status_code=201)
def create_category(body: CategoryCreateBody, admin=Depends(get_current_admin)):
    name = body.name.strip()
    if database.db["category"].find_one({"name": name}):
        raise HTTPException(status_code=400, detail="Category already exists")
    cid = create_document("category", CategorySchema(name=name))
    return serialize_doc(database.db["category"].find_one({"_id": to_object_id(cid)}))


@app.delete("/api/categories/{category_id}")
def delete_category(category_id: str, admin=Depends(get_current_admin)):
    res = database.db["category"].delete_one({"_id": _object_id(category_id, "category")})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Category not found")
    return {"message": "Category removed"}


# ----------------------- FAQs -----------------------
@app.get("/api/faqs/for-all")
def public_faqs():
    return {"faqs": [serialize_doc(f) for f in database.get_documents("faq")]}


@app.get("/api/faqs")
def admin_faqs(admin=Depends(get_current_admin)):
    return {"faqs": [serialize_doc(f) for f in database.get_documents("faq")]}


@app.post("/api/faqs", status_code=201)
def add_faq(body: FaqCreateBody, admin=Depends(get_current_admin)):
    if not body.question or not body.answer:
        raise HTTPException(status_code=400, detail="Question and answer are required")
    fid = create_document("faq", FaqSchema(question=body.question, answer=body.answer))
    return {"message": "FAQ added successfully", "faq": serialize_doc(database.db["faq"].find_one({"_id": to_object_id(fid)}))}


@app.delete("/api/faqs/{faq_id}")
def delete_faq(faq_id: str, admin=Depends(get_current_admin)):
    res = database.db["faq"].delete_one({"_id": _object_id(faq_id, "FAQ")})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="FAQ not found")
    return {"message": "FAQ deleted successfully"}


# ----------------------- Cart -----------------------
def _cart_of(user_id: str) -> list:
    user = database.db["user"].find_one({"_id": to_object_id(user_id)}, {"cart": 1})
    return (user or {}).get("cart") or []


def _save_cart(user_id: str, cart: list) -> list:
    database.db["user"].update_one({"_id": to_object_id(user_id)}, {"$set": {"cart": cart, "updatedAt": utcnow()}})
    return [serialize_doc(c) for c in cart]


@app.post("/api/cart/add")
def add_to_cart(body: CartItemBody, user=Depends(get_current_user)):
    if body.quantity < 1:
        raise HTTPException(status_code=400, detail="Quantity must be at least 1")
    product_id = _object_id(body.product_id, "product")
    if not database.db["product"].find_one({"_id": product_id}, {"_id": 1}):
        raise HTTPException(status_code=404, detail="Product not found")
    cart = _cart_of(user["id"])
    existing = next((c for c in cart if c["product"] == product_id), None)
    if existing:
        existing["quantity"] += body.quantity
    else:
        cart.append({"product": product_id, "quantity": body.quantity})
    return {"message": "Product added to cart", "cart": _save_cart(user["id"], cart)}


@app.get("/api/cart")
def get_cart(user=Depends(get_current_user)):
    cart = _cart_of(user["id"])
    products = {p["_id"]: p for p in database.db["product"].find({"_id": {"$in": [c["product"] for c in cart]}})}
    valid = [c for c in cart if c["product"] in products]
    if len(valid) != len(cart):
        _save_cart(user["id"], valid)
    return [{**serialize_doc(c), "product": serialize_doc(products[c["product"]])} for c in valid]


@app.post("/api/cart/remove")
def remove_from_cart(body: CartRemoveBody, user=Depends(get_current_user)):
    if not body.product_id:
        raise HTTPException(status_code=400, detail="ProductId is required")
    cart = [c for c in _cart_of(user["id"]) if str(c["product"]) != body.product_id]
    return {"message": "Product removed from cart", "cart": _save_cart(user["id"], cart)}


@app.post("/api/cart/update")
def update_cart_item(body: CartUpdateBody, user=Depends(get_current_user)):
    if not body.product_id or body.quantity is None:
        raise HTTPException(status_code=400, detail="ProductId and quantity are required")
    cart = _cart_of(user["id"])
    entry = next((c for c in cart if str(c["product"]) == body.product_id), None)
    if entry is None:
        raise HTTPException(status_code=404, detail="Product not found in cart")
    if body.quantity <= 0:
        cart = [c for c in cart if c is not entry]
    else:
        entry["quantity"] = body.quantity
    return {"message": "Cart updated", "cart": _save_cart(user["id"], cart)}


@app.post("/api/cart/clear")
def clear_cart(user=Depends(get_current_user)):
    _save_cart(user["id"], [])
    return {"message": "Cart cleared successfully"}


# ----------------------- Orders -----------------------
@app.post("/api/orders", status_code=201)
def create_order(body: OrderCreateBody, user=Depends(get_current_user)):
    order = orders.create_order(user["id"], body)
    return {"message": "Order created successfully", "order": order}


@app.get("/api/orders")
def list_user_orders(user=Depends(get_current_user)):
    return {"orders": orders.user_orders(user["id"])}


@app.patch("/api/orders/{order_id}/cancel")
def cancel_order(order_id: str, user=Depends(get_current_user)):
    orders.cancel_order(user["id"], order_id)
    return {"message": "Order cancelled successfully"}


# ----------------------- Admin -----------------------
@app.get("/api/admin/dashboard")
def admin_dashboard(admin=Depends(get_current_admin)):
    return analytics.dashboard_metrics()


@app.get("/api/admin/orders/recent")
def admin_recent_orders(admin=Depends(get_current_admin)):
    return analytics.recent_orders()


@app.get("/api/admin/sales-data")
def admin_sales_data(admin=Depends(get_current_admin)):
    return analytics.sales_data()


@app.get("/api/admin")
def admin_list_orders(admin=Depends(get_current_admin)):
    return [serialize_doc(o) for o in orders.list_orders()]


@app.get("/api/admin/{order_id}")
def admin_get_order(order_id: str, admin=Depends(get_current_admin)):
    return orders.admin_order_view(order_id)


@app.put("/api/admin/payment/{order_id}")
def admin_update_payment(order_id: str, body: PaymentStatusBody, admin=Depends(get_current_admin)):
    order = orders.set_payment_status(order_id, body.is_paid)
    return {"message": "Payment marked as paid" if body.is_paid else "Payment marked as unpaid", "order": order}


@app.put("/api/admin/delivery-status/{order_id}")
def admin_update_delivery(order_id: str, body: DeliveryStatusBody, admin=Depends(get_current_admin)):
    order = orders.set_delivery_status(order_id, body.is_delivered)
    return {"message": f"Delivery status updated to {order['deliveryStatus']}", "order": order}


@app.put("/api/admin/{order_id}")
def admin_update_order(order_id: str, body: OrderUpdateBody, admin=Depends(get_current_admin)):
    return orders.update_order(order_id, body)


@app.delete("/api/admin/{order_id}")
def admin_delete_order(order_id: str, admin=Depends(get_current_admin)):
    orders.delete_order(order_id)
    return {"message": "Order deleted successfully"}


# ----------------------- Reviews -----------------------
@app.get("/api/reviews/{product_id}")
def get_reviews(product_id: str, page: int = 1, limit: int = 10, sort: str = "most-recent"):
    return reviews.list_reviews(_object_id(product_id, "product"), page=page, limit=limit, sort=sort)


@app.post("/api/reviews/{product_id}", status_code=201)
def post_review(product_id: str, body: ReviewCreateBody, user=Depends(get_current_user)):
    oid = _object_id(product_id, "product")
    try:
        review = reviews.submit_review(user, oid, body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_first_error(e))
    return {"message": "Review submitted successfully", "review": review}


@app.put("/api/reviews/{review_id}/helpful")
def mark_review_helpful(review_id: str, user=Depends(get_current_user)):
    count = reviews.mark_helpful(_object_id(review_id, "review"))
    if count is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return {"message": "Helpful count updated", "helpfulCount": count}


# ----------------------- Analytics -----------------------
@app.get("/api/analytics")
def get_analytics(admin=Depends(get_current_admin)):
    most_ordered = analytics.most_ordered_products()
    if not most_ordered:
        most_ordered = [{"message": "No products ordered in the last 30 days"}]
    return {"mostOrderedProducts": most_ordered}


# ----------------------- Seed Demo Data -----------------------
DEMO_PRODUCTS = [
    {
        "name": "Chamomile Flowers",
        "images": ["/products/chamomile.jpg"],
        "price": 850,
        "originalPrice": 1000,
        "category": "Tea Herbs",
        "inStock": 40,
        "isOrganic": True,
        "description": "Dried whole chamomile flowers for a calming evening tea.",
        "isFeatured": True,
    },
    {
        "name": "Moringa Powder",
        "images": ["/products/moringa.jpg"],
        "price": 1200,
        "category": "Medicinal Herbs",
        "inStock": 25,
        "isOrganic": True,
        "description": "Stone-ground moringa leaf powder rich in vitamins.",
        "isBestSeller": True,
    },
    {
        "name": "Turmeric Root",
        "images": ["/products/turmeric.jpg"],
        "price": 600,
        "category": "Spices",
        "inStock": 60,
        "description": "Sun-dried turmeric root, ground fresh on order.",
    },
    {
        "name": "Rose Petals",
        "images": ["/products/rose-petals.jpg"],
        "price": 950,
        "category": "Beauty Herbs",
        "inStock": 30,
        "description": "Food-grade rose petals for face packs and infusions.",
    },
    {
        "name": "Dried Mint",
        "images": ["/products/mint.jpg"],
        "price": 400,
        "category": "Culinary Herbs",
        "inStock": 50,
        "isOrganic": True,
        "description": "Aromatic mint leaves for chutneys, raita and tea.",
    },
]


@app.post("/seed")
def seed():
    if database.db["product"].count_documents({}) > 0:
        return {"seeded": False, "message": "Products already exist"}
    for p in DEMO_PRODUCTS:
        create_document("product", ProductSchema(**p))
    if database.db["admin"].count_documents({}) == 0:
        admin = AdminSchema(
            name="Admin",
            email=os.getenv("ADMIN_SEED_EMAIL", "admin@herbie.com"),
            password_hash=hash_password(os.getenv("ADMIN_SEED_PASSWORD", "admin123")),
        )
        create_document("admin", admin)
    return {"seeded": True, "products": database.db["product"].count_documents({})}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
