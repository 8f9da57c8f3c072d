"""
Product reviews: purchase verification, listing and rating stats.
"""
import logging
import math
from typing import List, Optional

from bson.objectid import ObjectId
from pymongo import ReturnDocument

import database
from database import serialize_doc, utcnow
from schemas import VERIFYING_STATUSES, CamelModel, Review

logger = logging.getLogger(__name__)

SORT_OPTIONS = {
    "most-recent": [("createdAt", -1)],
    "highest-rated": [("rating", -1), ("createdAt", -1)],
    "lowest-rated": [("rating", 1), ("createdAt", -1)],
    "most-helpful": [("helpfulCount", -1), ("createdAt", -1)],
}


class ReviewCreateBody(CamelModel):
    rating: int
    title: str
    content: str
    recommend: bool
    attributes: List[str] = []
    location: str = ""


def is_verified_purchase(user_id: ObjectId, product_id: ObjectId) -> bool:
    order = database.db["order"].find_one({
        "user": user_id,
        "items.product": product_id,
        "status": {"$in": list(VERIFYING_STATUSES)},
    })
    return order is not None


def submit_review(user: dict, product_id: ObjectId, body: ReviewCreateBody) -> dict:
    """Store a review; unverified reviews are accepted, just flagged."""
    user_id = ObjectId(user["id"])
    verified = is_verified_purchase(user_id, product_id)
    review = Review(
        product_id=product_id,
        user_id=user_id,
        name=user.get("name") or "",
        rating=body.rating,
        title=body.title.strip(),
        content=body.content.strip(),
        recommend=body.recommend,
        verified=verified,
        location=body.location,
        attributes=body.attributes,
    )
    review_id = database.create_document("review", review)
    logger.info("Review %s on product %s by user %s (verified=%s)", review_id, product_id, user["id"], verified)
    return serialize_doc(database.db["review"].find_one({"_id": ObjectId(review_id)}))


def rating_stats(product_id: ObjectId) -> dict:
    ratings = [(r.get("rating", 0), r.get("recommend", False))
               for r in database.db["review"].find({"productId": product_id}, {"rating": 1, "recommend": 1})]
    total = len(ratings)
    breakdown = [0, 0, 0, 0, 0]  # 5 stars first
    for rating, _ in ratings:
        if 1 <= rating <= 5:
            breakdown[5 - rating] += 1
    average = round(sum(r for r, _ in ratings) / total, 1) if total else 0
    recommend_pct = round(sum(1 for _, rec in ratings if rec) / total * 100) if total else 0
    return {"average": average, "total": total, "breakdown": breakdown, "recommendPercentage": recommend_pct}


def list_reviews(product_id: ObjectId, page: int = 1, limit: int = 10, sort: Optional[str] = None) -> dict:
    page = max(page, 1)
    limit = max(limit, 1)
    cursor = (
        database.db["review"]
        .find({"productId": product_id})
        .sort(SORT_OPTIONS.get(sort or "", SORT_OPTIONS["most-recent"]))
        .skip((page - 1) * limit)
        .limit(limit)
    )
    stats = rating_stats(product_id)
    return {
        "reviews": [serialize_doc(r) for r in cursor],
        "ratingStats": stats,
        "page": page,
        "totalPages": math.ceil(stats["total"] / limit),
    }


def mark_helpful(review_id: ObjectId) -> Optional[int]:
    res = database.db["review"].find_one_and_update(
        {"_id": review_id},
        {"$inc": {"helpfulCount": 1}, "$set": {"updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return res.get("helpfulCount") if res else None
