# storefront/api/routes/reviews.py
import logging

from fastapi import APIRouter, Query, status

from storefront.api.schemas.review.review import ReviewCreate, ReviewCreatedOut, ReviewRowsOut
from storefront.api.services.review_reconciler import organize_rows
from storefront.core.dependencies import (
    GetBackendClientDep,
    GetCSRFTokenDep,
    GetLanguageDep,
    GetOptionalSessionDep,
    GetReviewReconcilerDep,
)
from storefront.core.i18n import Language, localized_http_exception, translate
from storefront.core.utils.validators import sanitize_input, validate_review_comment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.get("", response_model=ReviewRowsOut)
async def list_reviews(
        session: GetOptionalSessionDep,
        backend: GetBackendClientDep,
        reconciler: GetReviewReconcilerDep,
        language: GetLanguageDep,
        limit: int = Query(50, ge=1, le=200),
):
    """Server reviews plus the caller's own reviews not listed by the server yet"""
    snapshot = await backend.list_reviews(limit)
    owner_id = session.user_id if session is not None else None
    reviews = [review.localized(language) for review in reconciler.merge(snapshot, owner_id)]
    return ReviewRowsOut(reviews=reviews, rows=organize_rows(reviews))


@router.post("", response_model=ReviewCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_review(
        payload: ReviewCreate,
        session: GetOptionalSessionDep,
        backend: GetBackendClientDep,
        reconciler: GetReviewReconcilerDep,
        language: GetLanguageDep,
        csrf_token: GetCSRFTokenDep,
):
    if session is None:
        raise localized_http_exception(status.HTTP_401_UNAUTHORIZED, "login_required_review", language)

    # the comment typed in the active language is the one the form submitted
    text = payload.comment_ar if language == Language.AR and payload.comment_ar else payload.comment
    # every filled comment field is forwarded and must pass the same rules
    for value in [text] + [value for value in (payload.comment, payload.comment_ar) if value and value.strip()]:
        result = validate_review_comment(value)
        if not result.valid:
            raise localized_http_exception(
                status.HTTP_400_BAD_REQUEST, result.error_key, language, **result.params,
            )

    text = sanitize_input(text)
    review = await backend.create_review(
        session.token,
        csrf_token,
        {
            "rating": payload.rating,
            "comment": sanitize_input(payload.comment) or text,
            "commentAr": sanitize_input(payload.comment_ar) or text,
        },
    )

    if review is not None:
        review = reconciler.add_pending(session.user_id, review).localized(language)
        logger.info(f"⭐ Review {review.id} created by user {session.user_id}")

    return ReviewCreatedOut(message=translate("review_added", language), review=review)
