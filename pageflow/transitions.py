"""Page status rules.

Status is derived from which artifacts exist, except in the reviewer-owned
states, which only review actions can leave. Both artifact managers go
through :func:`compute_status`; nothing else writes a derived status.
"""

from __future__ import annotations

from typing import Dict, Union

from pageflow.errors import InvalidTransition, ValidationError
from pageflow.records import PageStatus, ReviewAction


REVIEWER_CONTROLLED = frozenset(
    {PageStatus.PENDING_REVIEW, PageStatus.APPROVED, PageStatus.REJECTED}
)

_REVIEW_OUTCOMES: Dict[ReviewAction, PageStatus] = {
    ReviewAction.APPROVE: PageStatus.APPROVED,
    ReviewAction.REJECT: PageStatus.REJECTED,
    ReviewAction.REQUEST_REVISION: PageStatus.REVISION_REQUESTED,
}


def derive_status(has_seo: bool, has_content: bool) -> PageStatus:
    if has_seo and has_content:
        return PageStatus.PENDING_REVIEW
    if has_seo:
        return PageStatus.AWAITING_CONTENT
    if has_content:
        return PageStatus.AWAITING_SEO
    return PageStatus.DRAFT


def compute_status(current: PageStatus, has_seo: bool, has_content: bool) -> PageStatus:
    """Status after an artifact write.

    Idempotent: calling it again with the same inputs returns the same value.
    ``revision_requested`` is left as soon as the artifacts allow it.
    """
    current = PageStatus(current)
    if current in REVIEWER_CONTROLLED:
        return current
    return derive_status(has_seo, has_content)


def apply_review_action(
    current: PageStatus, action: Union[ReviewAction, str]
) -> PageStatus:
    current = PageStatus(current)
    try:
        action = ReviewAction(action)
    except ValueError:
        raise ValidationError(f"Unknown review action '{action}'", field="action") from None

    if current is not PageStatus.PENDING_REVIEW:
        raise InvalidTransition(current.value, action.value)
    return _REVIEW_OUTCOMES[action]
