import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from repositories import (
    SwipeRepository,
    SwipeCursor,
    SwipeRecord,
    MatchRecord,
    ConflictError,
    MissingReferenceError,
)
from models import SwipeDirection
from utils.errors import (
    ApiError,
    ValidationError,
    InvalidDirection,
    InvalidTarget,
    SelfSwipeRejected,
    DuplicateSwipe,
    NotFoundError,
    BatchFailed,
)
from utils.matching import try_materialize_match
from utils.profiles import ProfileResolver

logger = logging.getLogger(__name__)


def parse_direction(value) -> SwipeDirection:
    try:
        return SwipeDirection.parse(value)
    except ValueError:
        raise InvalidDirection(f"Invalid swipe direction: {value!r}") from None


def record_swipe(
    repository: SwipeRepository,
    profiles: ProfileResolver,
    swiper_id: str,
    swiped_id: str,
    direction
) -> SwipeRecord:
    """
    Append one swipe to the ledger.

    Raises:
        InvalidTarget: swiped_id is missing or does not resolve to a user
        SelfSwipeRejected: swiper_id == swiped_id
        InvalidDirection: direction is not LIKE/PASS (or RIGHT/LEFT)
        DuplicateSwipe: swiper_id already swiped on swiped_id
    """
    if not isinstance(swiped_id, str) or not swiped_id.strip():
        raise InvalidTarget()

    if swiper_id == swiped_id:
        raise SelfSwipeRejected()

    direction = parse_direction(direction)

    if not profiles.exists(swiped_id):
        raise InvalidTarget(f"User {swiped_id} not found")

    try:
        swipe = repository.insert_swipe(swiper_id, swiped_id, direction)
    except ConflictError:
        logger.warning(f"Duplicate swipe detected: {swiper_id} -> {swiped_id}")
        raise DuplicateSwipe() from None
    except MissingReferenceError:
        raise InvalidTarget(f"User {swiped_id} not found") from None

    logger.debug(f"Created swipe: {swiper_id} -> {swiped_id} ({direction.value})")
    return swipe


@dataclass
class SwipeOutcome:
    """What happened to one item of a batch"""

    target: Any
    swipe: Optional[SwipeRecord] = None
    match: Optional[MatchRecord] = None
    error: Optional[Dict[str, Any]] = None


@dataclass
class BatchResult:
    created: List[SwipeRecord] = field(default_factory=list)
    matches: List[MatchRecord] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: List[SwipeOutcome]) -> 'BatchResult':
        result = cls()
        for outcome in outcomes:
            if outcome.swipe is not None:
                result.created.append(outcome.swipe)
            if outcome.match is not None:
                result.matches.append(outcome.match)
            if outcome.error is not None:
                result.errors.append(outcome.error)
        return result

    def to_dict(self) -> dict:
        return {
            'created': len(self.created),
            'swipes': [swipe.to_dict() for swipe in self.created],
            'matches': [match.to_dict() for match in self.matches],
            'errors': list(self.errors),
        }


def _item_error(target, error: ApiError) -> Dict[str, Any]:
    return {'target': target, 'reason': error.reason, 'message': error.message}


def apply_swipe_item(
    repository: SwipeRepository,
    profiles: ProfileResolver,
    swiper_id: str,
    item
) -> SwipeOutcome:
    """Record one batch item and, for a LIKE, check for a match. Never raises."""
    if not isinstance(item, dict):
        return SwipeOutcome(target=None, error=_item_error(None, InvalidTarget("Swipe must be an object")))

    target = item.get('swiped_on', item.get('target_user_id'))

    try:
        swipe = record_swipe(repository, profiles, swiper_id, target, item.get('direction'))
    except ApiError as e:
        return SwipeOutcome(target=target, error=_item_error(target, e))
    except Exception as e:
        logger.exception(f"Error creating swipe {swiper_id} -> {target}: {str(e)}")
        return SwipeOutcome(
            target=target,
            error={'target': target, 'reason': 'SwipeFailed', 'message': "Failed to create swipe"}
        )

    if swipe.direction is not SwipeDirection.LIKE:
        return SwipeOutcome(target=target, swipe=swipe)

    try:
        match = try_materialize_match(repository, swiper_id, target)
    except Exception as e:
        # swipe is already committed, so this pair is left without a match row
        logger.exception(f"Error materializing match {swiper_id} <-> {target}: {str(e)}")
        return SwipeOutcome(
            target=target,
            swipe=swipe,
            error={'target': target, 'reason': 'MatchFailed', 'message': "Swipe saved but match check failed"}
        )

    return SwipeOutcome(target=target, swipe=swipe, match=match)


def submit_swipe_batch(
    repository: SwipeRepository,
    profiles: ProfileResolver,
    swiper_id: str,
    items: list,
    max_items: Optional[int] = None
) -> BatchResult:
    """
    Record a batch of swipes from one user, in order, one item at a time.

    A rejected item is reported in `errors` and never stops the rest of the
    batch. Raises BatchFailed only when nothing at all was created.
    """
    if not isinstance(items, list):
        raise ValidationError("Request body must be an array of swipes")
    if not items:
        raise ValidationError("Swipes array cannot be empty")
    if max_items is not None and len(items) > max_items:
        raise ValidationError(f"A batch may contain at most {max_items} swipes")

    if not profiles.exists(swiper_id):
        raise NotFoundError("User not found")

    logger.debug(f"Processing {len(items)} swipes for user {swiper_id}")

    outcomes = [apply_swipe_item(repository, profiles, swiper_id, item) for item in items]
    result = BatchResult.from_outcomes(outcomes)

    logger.info(
        f"Batch complete for user {swiper_id} - Created: {len(result.created)}, "
        f"Matches: {len(result.matches)}, Errors: {len(result.errors)}"
    )

    if not result.created and result.errors:
        raise BatchFailed(result.errors)

    return result


def get_swipe_history(
    repository: SwipeRepository,
    profiles: ProfileResolver,
    swiper_id: str,
    direction=None,
    limit: Optional[int] = None,
    before: Optional[SwipeCursor] = None
) -> List[dict]:
    """
    Get a user's swipes, newest first, each with the swiped user's summary.

    Args:
        direction: Optional LIKE/PASS (or RIGHT/LEFT) filter
        limit: Page size
        before: Only swipes listed after this cursor
    """
    if direction is not None:
        direction = parse_direction(direction)

    if not profiles.exists(swiper_id):
        raise NotFoundError("User not found")

    swipes = repository.list_swipes(swiper_id, direction=direction, before=before, limit=limit)
    summaries = profiles.summarize_many(swipe.swiped_id for swipe in swipes)

    history = []
    for swipe in swipes:
        entry = swipe.to_dict()
        entry['user'] = summaries.get(swipe.swiped_id)
        history.append(entry)

    logger.debug(f"Retrieved {len(history)} swipe(s) for user {swiper_id}")
    return history
