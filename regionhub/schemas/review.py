# regionhub/schemas/review.py
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional

class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    content: str = Field(min_length=1)

class ReviewOut(BaseModel):
    id: int
    user_id: int
    product_id: int
    rating: int
    content: str
    user_name: Optional[str] = None
    created_at: Optional[datetime] = None
