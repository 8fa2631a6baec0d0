import logging
from typing import List, Optional, Tuple

from repositories import SwipeRepository, MatchRecord, ConflictError
from models import SwipeDirection
from utils.errors import NotFoundError
from utils.profiles import ProfileResolver

logger = logging.getLogger(__name__)


def canonical_pair(user_id_a: str, user_id_b: str) -> Tuple[str, str]:
    """
    Order two user IDs so the unordered pair always maps to the same row.

    Plain string comparison, matching the check constraint on the table,
    so both sides of a mutual like compute the same key.
    """
    user_id_1, user_id_2 = sorted([user_id_a, user_id_b])
    return user_id_1, user_id_2


def try_materialize_match(
    repository: SwipeRepository,
    swiper_id: str,
    swiped_id: str
) -> Optional[MatchRecord]:
    """
    Create the match for a LIKE that has just been recorded, if it is reciprocated.

    Args:
        repository: Swipe/match storage
        swiper_id: User whose LIKE was just stored
        swiped_id: User that was liked

    Returns:
        The new match, or None when there is no reciprocal LIKE or the
        match already exists (the other side's request created it first).
    """
    reciprocal = repository.find_swipe(swiped_id, swiper_id, SwipeDirection.LIKE)
    if reciprocal is None:
        return None

    user_id_1, user_id_2 = canonical_pair(swiper_id, swiped_id)

    try:
        match = repository.insert_match(user_id_1, user_id_2)
    except ConflictError:
        logger.info(f"Match between {user_id_1} and {user_id_2} already exists")
        return None

    logger.info(f"Match created between {user_id_1} and {user_id_2}")
    return match


def get_matches(
    repository: SwipeRepository,
    profiles: ProfileResolver,
    user_id: str
) -> List[dict]:
    """
    Get all active matches for a user, most recent first.

    Each entry carries the other party's summary, never the requesting user.
    """
    if not profiles.exists(user_id):
        raise NotFoundError("User not found")

    matches = repository.list_active_matches(user_id)
    summaries = profiles.summarize_many(match.other_party(user_id) for match in matches)

    matches_data = []
    for match in matches:
        other_user_id = match.other_party(user_id)
        other_user = summaries.get(other_user_id)

        if not other_user:
            logger.warning(f"Skipping match {match.id}: user {other_user_id} not found")
            continue

        matches_data.append({
            'match_id': match.id,
            'matched_at': match.created_at.isoformat(),
            'user': other_user
        })

    logger.info(f"Retrieved {len(matches_data)} match(es) for user {user_id}")
    return matches_data
