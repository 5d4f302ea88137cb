"""Review DTOs for the Service Layer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from modules.reviews.exceptions import InvalidReviewData
from modules.reviews.models import MAX_RATING, MIN_RATING


class SubmitReviewDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    user_id: UUID
    product_id: UUID
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)
    comment: str = Field(default="", max_length=2000)


def build_submit_review_dto(user_id: Any, payload: Dict[str, Any]) -> SubmitReviewDTO:
    """Raises:
    InvalidReviewData: one message per failing field.
    """
    if not isinstance(payload, Mapping):
        raise InvalidReviewData(["Request body must be a JSON object."])
    try:
        return SubmitReviewDTO(
            user_id=user_id,
            product_id=payload.get("product_id"),
            rating=payload.get("rating"),
            comment=payload.get("comment") or "",
        )
    except ValidationError as exc:
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            messages.append(f"{location}: {error['msg']}" if location else error["msg"])
        raise InvalidReviewData(messages) from exc
