# regionhub/routes/reviews.py
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from regionhub.database import get_db
from regionhub.models.product import Product
from regionhub.models.review import Review
from regionhub.models.users import User
from regionhub.schemas.review import ReviewCreate, ReviewOut
from regionhub.utils.audit import write_log, client_ip
from regionhub.utils.errors import Conflict, NotFound
from regionhub.utils.tokenJWT import role_required

router = APIRouter(prefix="/products/{product_id}/reviews", tags=["Reviews"])


def _review_to_out(review: Review) -> dict:
    return {
        "id": review.id,
        "user_id": review.user_id,
        "product_id": review.product_id,
        "rating": review.rating,
        "content": review.content,
        "user_name": review.user.name if review.user else None,
        "created_at": review.created_at,
    }


@router.get("", response_model=List[ReviewOut])
def list_reviews(product_id: int, db: Session = Depends(get_db)):
    if db.get(Product, product_id) is None:
        raise NotFound("Product not found")
    reviews = (db.query(Review)
               .filter(Review.product_id == product_id)
               .order_by(Review.created_at.desc(), Review.id.desc())
               .all())
    return [_review_to_out(r) for r in reviews]


# One review per customer and product
@router.post("", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
def add_review(
    product_id: int,
    payload: ReviewCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("customer")),
):
    if db.get(Product, product_id) is None:
        raise NotFound("Product not found")
    exists = db.query(Review.id).filter(Review.product_id == product_id, Review.user_id == current_user.id).first()
    if exists:
        raise Conflict("Product already reviewed")

    review = Review(user_id=current_user.id, product_id=product_id, rating=payload.rating,
                    content=payload.content.strip())
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Product already reviewed")
    db.refresh(review)

    write_log(db, user_id=current_user.id, action="REVIEW_CREATE", resource="reviews",
              resource_id=review.id, ip=client_ip(request), meta={"product_id": product_id, "rating": review.rating})
    return _review_to_out(review)
