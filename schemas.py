"""
Database Schemas for the Herbie store

Each Pydantic model corresponds to one MongoDB collection.
Collection name is the lowercase of the class name.
Documents are stored with camelCase keys (the alias of each field).
"""
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from bson.objectid import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

ORDER_STATUSES = ("placed", "pending", "processing", "shipped", "delivered", "cancelled")
CANCELLABLE_STATUSES = ("pending", "processing")
VERIFYING_STATUSES = ("shipped", "delivered")
PAYMENT_METHODS = ("card", "easypaisa", "cod")
PRODUCT_CATEGORIES = ("Tea Herbs", "Medicinal Herbs", "Spices", "Beauty Herbs", "Culinary Herbs")

OrderStatus = Literal["placed", "pending", "processing", "shipped", "delivered", "cancelled"]
DeliveryStatus = Literal["In Transit", "Delivered"]
ProductCategory = Literal["Tea Herbs", "Medicinal Herbs", "Spices", "Beauty Herbs", "Culinary Herbs"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, arbitrary_types_allowed=True)


# ----------------------- Accounts -----------------------
class CartItem(CamelModel):
    product: ObjectId
    quantity: int = Field(1, ge=1)


class User(CamelModel):
    name: str = ""
    email: EmailStr
    password_hash: Optional[str] = None
    google_id: Optional[str] = None
    is_google_user: bool = False
    is_verified: bool = False
    avatar: str = ""
    location: str = ""
    bio: str = ""
    cart: List[CartItem] = []
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None
    verification_token: Optional[str] = None
    verification_token_expires: Optional[datetime] = None


class Admin(CamelModel):
    name: str
    email: EmailStr
    password_hash: str
    address: str = ""
    phone: str = ""
    image: str = ""
    bio: str = ""
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None


# ----------------------- Catalog -----------------------
class Product(CamelModel):
    name: str
    images: List[str] = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    rating: float = 0
    reviews: int = 0
    category: ProductCategory
    in_stock: int = Field(0, ge=0)
    is_organic: bool = False
    description: str
    is_featured: bool = False
    is_best_seller: bool = False
    is_new_arrival: bool = True


class Category(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)


class Faq(CamelModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


# ----------------------- Orders -----------------------
class OrderItem(CamelModel):
    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    product: ObjectId
    name: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)


class ShippingAddress(CamelModel):
    name: str
    email: str
    phone: str
    address: str
    city: str
    country: str
    zip: str


class CardPayment(CamelModel):
    method: Literal["card"] = "card"
    card_number: str = Field(..., description="Last 4 digits only")
    expiry: str


class EasypaisaPayment(CamelModel):
    method: Literal["easypaisa"] = "easypaisa"
    easypaisa_number: str


class CodPayment(CamelModel):
    method: Literal["cod"] = "cod"


PaymentDetails = Annotated[Union[CardPayment, EasypaisaPayment, CodPayment], Field(discriminator="method")]


class Totals(CamelModel):
    subtotal: float = Field(..., ge=0)
    shipping: float = Field(..., ge=0)
    tax: float = Field(..., ge=0)
    grand_total: float = Field(..., ge=0)


class StatusEntry(CamelModel):
    status: OrderStatus
    timestamp: datetime


class Order(CamelModel):
    user: ObjectId
    items: List[OrderItem]
    shipping_address: ShippingAddress
    payment_method: Literal["card", "easypaisa", "cod"]
    payment_details: dict = {}
    totals: Totals
    status: OrderStatus = "placed"
    is_paid: bool = False
    is_delivered: bool = False
    delivery_status: DeliveryStatus = "In Transit"
    tracking_number: Optional[str] = None
    admin_notes: Optional[str] = None
    delivery_date: Optional[datetime] = None
    status_history: List[StatusEntry] = []


# ----------------------- Reviews -----------------------
class Review(CamelModel):
    product_id: ObjectId
    user_id: ObjectId
    name: str = Field(..., min_length=2, max_length=50)
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=3, max_length=100)
    content: str = Field(..., min_length=10, max_length=1000)
    recommend: bool
    verified: bool = False
    helpful_count: int = Field(0, ge=0)
    location: str = ""
    attributes: List[Annotated[str, Field(max_length=50)]] = []
