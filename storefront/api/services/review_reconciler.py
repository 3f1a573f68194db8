# storefront/api/services/review_reconciler.py
"""
Review List Reconciliation
==========================

A review the shopper just posted must stay visible to them even when the
next server listing does not contain it yet. Instead of re-fetching after a
fixed delay, locally created reviews are kept as *pending* entries of their
author and merged with every server snapshot that author requests:

- entries are keyed by id, a server row always wins over a pending one
- a pending id that shows up in a snapshot is promoted (no longer pending)
- pending ids still missing from the snapshot are kept in the author's result
- pending entries expire after `ttl_seconds` (held for moderation, deleted...)
- the merged list is newest first
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from storefront.api.schemas.review.review import CustomerReview

logger = logging.getLogger(__name__)

ROW_SIZE = 10
ROW_COPIES = 3
PENDING_TTL_SECONDS = 600


@dataclass
class PendingReview:
    review: CustomerReview
    added_at: float


class ReviewReconciler:

    def __init__(self, ttl_seconds: float = PENDING_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # owner id -> review id -> pending entry
        self._pending: dict[str, dict[str, PendingReview]] = {}

    def pending_ids(self, owner_id: str) -> list[str]:
        self._expire()
        return list(self._pending.get(owner_id, {}))

    def add_pending(self, owner_id: str, review: CustomerReview) -> CustomerReview:
        """Records a review created by `owner_id` but not yet confirmed by a listing"""
        if not review.created_at:
            review = review.model_copy(update={
                "created_at": datetime.now(timezone.utc).isoformat(),
            })
        self._pending.setdefault(owner_id, {})[review.id] = PendingReview(review, self._clock())
        return review

    def discard(self, review_id: str) -> bool:
        """Drops a pending review whatever its owner (deleted or edited by an admin)"""
        found = False
        for owner_id in list(self._pending):
            if self._pending[owner_id].pop(review_id, None) is not None:
                found = True
            if not self._pending[owner_id]:
                del self._pending[owner_id]
        return found

    def merge(
            self,
            server_snapshot: Iterable[CustomerReview],
            owner_id: Optional[str] = None,
    ) -> list[CustomerReview]:
        """
        Merges a server snapshot with the pending reviews of `owner_id`.

        Anonymous callers (`owner_id=None`) get the snapshot only. Promotion
        applies to every owner, since a listed review is confirmed for all.
        """
        self._expire()
        merged: dict[str, CustomerReview] = {}

        for review in server_snapshot:
            if not review.id or review.id in merged:
                continue
            merged[review.id] = review

        promoted = 0
        for owner in list(self._pending):
            entries = self._pending[owner]
            for review_id in [review_id for review_id in entries if review_id in merged]:
                del entries[review_id]
                promoted += 1
            if not entries:
                del self._pending[owner]

        if promoted:
            logger.info(f"⭐ {promoted} pending review(s) confirmed by the server")

        if owner_id is not None:
            for review_id, entry in self._pending.get(owner_id, {}).items():
                merged.setdefault(review_id, entry.review)

        return sort_newest_first(merged.values())

    def _expire(self):
        deadline = self._clock() - self.ttl_seconds
        for owner_id in list(self._pending):
            entries = self._pending[owner_id]
            for review_id in [review_id for review_id, entry in entries.items() if entry.added_at <= deadline]:
                del entries[review_id]
                logger.info(f"⌛ Pending review {review_id} expired without server confirmation")
            if not entries:
                del self._pending[owner_id]


def sort_newest_first(reviews: Iterable[CustomerReview]) -> list[CustomerReview]:
    return sorted(reviews, key=lambda review: review.parsed_created_at(), reverse=True)


def organize_rows(
        reviews: Iterable[CustomerReview],
        row_size: int = ROW_SIZE,
        copies: int = ROW_COPIES,
) -> list[list[CustomerReview]]:
    """
    Splits reviews into marquee rows.

    Duplicated ids are dropped (first occurrence kept), the list is sorted
    newest first, cut into rows of `row_size`, and every row is repeated
    `copies` times so the scrolling animation loops seamlessly.
    """
    unique: dict[str, CustomerReview] = {}
    for review in reviews:
        unique.setdefault(review.id, review)

    ordered = sort_newest_first(unique.values())

    rows = []
    for start in range(0, len(ordered), row_size):
        row = ordered[start:start + row_size]
        rows.append(row * copies)
    return rows
