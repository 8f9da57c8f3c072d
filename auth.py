import hashlib
import logging
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

import database
from database import serialize_doc, to_object_id

logger = logging.getLogger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET", "devsecret")
JWT_ALGO = "HS256"
USER_TOKEN_TTL = timedelta(hours=12)
ADMIN_TOKEN_TTL = timedelta(days=7)
RESET_TOKEN_TTL = timedelta(hours=1)
VERIFICATION_TOKEN_TTL = timedelta(hours=24)

security = HTTPBearer(auto_error=False)

_PRIVATE_FIELDS = (
    "passwordHash",
    "resetPasswordToken",
    "resetPasswordExpires",
    "verificationToken",
    "verificationTokenExpires",
)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return secrets.compare_digest(hash_password(password), password_hash)


def public_account(doc: dict) -> dict:
    """Serialize a user/admin document without credentials or token hashes."""
    data = serialize_doc(doc)
    for field in _PRIVATE_FIELDS:
        data.pop(field, None)
    return data


# ----------------------- JWT -----------------------
def create_token(payload: dict, ttl: timedelta = USER_TOKEN_TTL) -> str:
    exp = datetime.now(timezone.utc) + ttl
    to_encode = {**payload, "exp": exp}
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGO)


def create_user_token(user_id: str) -> str:
    return create_token({"id": user_id}, USER_TOKEN_TTL)


def create_admin_token(admin_id: str) -> str:
    return create_token({"id": admin_id, "role": "admin"}, ADMIN_TOKEN_TTL)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGO])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


def _principal_id(credentials: Optional[HTTPAuthorizationCredentials], role: Optional[str]):
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Authorization token required")
    payload = decode_token(credentials.credentials)
    if payload.get("role") != role:
        raise HTTPException(status_code=401, detail="Invalid token payload")
    principal_id = to_object_id(payload.get("id"))
    if principal_id is None:
        raise HTTPException(status_code=401, detail="Invalid token format")
    return principal_id


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    user_id = _principal_id(credentials, None)
    user = database.db["user"].find_one({"_id": user_id})
    if not user:
        logger.warning("Token for unknown user %s", user_id)
        raise HTTPException(status_code=401, detail="User not found")
    return public_account(user)


def get_current_admin(credentials: HTTPAuthorizationCredentials = Depends(security)):
    admin_id = _principal_id(credentials, "admin")
    admin = database.db["admin"].find_one({"_id": admin_id})
    if not admin:
        logger.warning("Token for unknown admin %s", admin_id)
        raise HTTPException(status_code=401, detail="Admin not found")
    return public_account(admin)


# ----------------------- One-time tokens -----------------------
def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def issue_one_time_token(ttl: timedelta) -> Tuple[str, str, datetime]:
    """Return (raw token for the link, sha256 to store, expiry)."""
    raw = secrets.token_hex(32)
    return raw, hash_token(raw), datetime.now(timezone.utc) + ttl


def issue_password_reset(collection: str, account: dict) -> str:
    raw, hashed, expires = issue_one_time_token(RESET_TOKEN_TTL)
    database.db[collection].update_one(
        {"_id": account["_id"]},
        {"$set": {"resetPasswordToken": hashed, "resetPasswordExpires": expires}},
    )
    return raw


def consume_password_reset(collection: str, token: str, new_password: str) -> bool:
    res = database.db[collection].update_one(
        {
            "resetPasswordToken": hash_token(token),
            "resetPasswordExpires": {"$gt": datetime.now(timezone.utc)},
        },
        {
            "$set": {"passwordHash": hash_password(new_password), "updatedAt": datetime.now(timezone.utc)},
            "$unset": {"resetPasswordToken": "", "resetPasswordExpires": ""},
        },
    )
    return res.modified_count > 0


def issue_email_verification(user: dict) -> str:
    raw, hashed, expires = issue_one_time_token(VERIFICATION_TOKEN_TTL)
    database.db["user"].update_one(
        {"_id": user["_id"]},
        {"$set": {"verificationToken": hashed, "verificationTokenExpires": expires}},
    )
    return raw


def consume_email_verification(token: str) -> bool:
    res = database.db["user"].update_one(
        {
            "verificationToken": hash_token(token),
            "verificationTokenExpires": {"$gt": datetime.now(timezone.utc)},
        },
        {
            "$set": {"isVerified": True, "updatedAt": datetime.now(timezone.utc)},
            "$unset": {"verificationToken": "", "verificationTokenExpires": ""},
        },
    )
    return res.modified_count > 0
