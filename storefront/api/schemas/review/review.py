# storefront/api/schemas/review/review.py
from datetime import datetime, timezone
from typing import Optional

from dateutil.relativedelta import relativedelta
from pydantic import Field

from storefront.api.schemas.shared.base import AppBaseModel
from storefront.core.i18n import Language, translate


class ReviewAuthor(AppBaseModel):
    first_name: str = ""
    last_name: str = ""
    avatar: Optional[str] = None


class CustomerReview(AppBaseModel):
    id: str
    rating: int = Field(5, ge=1, le=5)
    comment: str = ""
    comment_ar: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    user: ReviewAuthor = Field(default_factory=ReviewAuthor)
    created_since: Optional[str] = None

    def parsed_created_at(self) -> datetime:
        """createdAt as an aware datetime; missing or malformed sorts as the epoch"""
        if not self.created_at:
            return datetime.fromtimestamp(0, tz=timezone.utc)
        try:
            dt = datetime.fromisoformat(self.created_at.replace("Z", "+00:00"))
        except ValueError:
            return datetime.fromtimestamp(0, tz=timezone.utc)
        return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)

    def localized(self, language: Language, now: Optional[datetime] = None) -> "CustomerReview":
        """Returns a copy with the bilingual `createdSince` label set"""
        if not self.created_at:
            return self

        dt = self.parsed_created_at()
        now = now or datetime.now(tz=timezone.utc)
        delta = relativedelta(now, dt)

        if delta.years > 0:
            label = translate("years_ago", language, n=delta.years)
        elif delta.months > 0:
            label = translate("months_ago", language, n=delta.months)
        elif delta.days > 0:
            label = translate("days_ago", language, n=delta.days)
        elif delta.hours > 0:
            label = translate("hours_ago", language, n=delta.hours)
        elif delta.minutes > 0:
            label = translate("minutes_ago", language, n=delta.minutes)
        else:
            label = translate("just_now", language)

        return self.model_copy(update={"created_since": label})


class ReviewCreate(AppBaseModel):
    rating: int = Field(5, ge=1, le=5)
    comment: str = ""
    comment_ar: str = ""
    csrf_token: Optional[str] = None


class ReviewRowsOut(AppBaseModel):
    reviews: list[CustomerReview]
    rows: list[list[CustomerReview]]


class ReviewCreatedOut(AppBaseModel):
    success: bool = True
    message: str
    review: Optional[CustomerReview] = None
