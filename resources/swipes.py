import logging
from middleware.auth import token_required, current_user_id
from flask_restful import Resource
from flask import request, current_app
from repositories import SwipeCursor, get_repository
from utils.errors import ApiError, ValidationError
from utils.profiles import get_profile_resolver
from utils.response import success_response, error_response, api_error_response
from utils.swiping import submit_swipe_batch, get_swipe_history
from utils.cache import (
    CacheManager,
    build_history_cache_key,
)

logger = logging.getLogger(__name__)


def _parse_limit(raw):
    if raw is None:
        return current_app.config['HISTORY_MAX_LIMIT']
    try:
        limit = int(raw)
    except ValueError:
        raise ValidationError("limit must be an integer") from None
    if limit < 1:
        raise ValidationError("limit must be positive")
    return min(limit, current_app.config['HISTORY_MAX_LIMIT'])


def _parse_cursor(raw):
    if raw is None:
        return None
    try:
        return SwipeCursor.decode(raw)
    except ValueError:
        raise ValidationError("before must be a cursor returned as next_cursor") from None


class SwipeBatchResource(Resource):
    """Resource for submitting swipes in batch"""

    @token_required
    def post(self):
        """
        Record several swipes at once.
        Body: [{"swiped_on": "<user id>", "direction": "LIKE" | "PASS"}]
        Any reciprocated LIKE creates a match, returned alongside the swipes.
        """
        try:
            user_id = current_user_id()
            data = request.get_json(silent=True)

            if not isinstance(data, list):
                return error_response("Request body must be an array of swipes", 400)

            result = submit_swipe_batch(
                get_repository(),
                get_profile_resolver(),
                user_id,
                data,
                max_items=current_app.config['MAX_SWIPE_BATCH']
            )

            CacheManager.invalidate_swipe_history(user_id)
            for match in result.matches:
                CacheManager.invalidate_matches(*match.user_ids)

            return success_response(
                result.to_dict(),
                f"Successfully created {len(result.created)} swipe(s)",
                201
            )

        except ApiError as e:
            logger.warning(f"Swipe batch rejected: {e.message}")
            return api_error_response(e)
        except Exception as e:
            logger.error(f"Error processing swipe batch: {str(e)}")
            return error_response("Failed to process swipes", 500)


class SwipeHistoryResource(Resource):
    """Resource for a user's past swipes"""

    @token_required
    def get(self):
        """
        Get the current user's swipes, newest first.
        Query params: direction (LIKE/PASS or RIGHT/LEFT), limit, before (cursor)
        """
        try:
            user_id = current_user_id()
            direction = request.args.get('direction')
            limit = _parse_limit(request.args.get('limit'))
            raw_before = request.args.get('before')
            before = _parse_cursor(raw_before)

            cache_key = build_history_cache_key(user_id, direction, limit, raw_before)
            cached_result = CacheManager.get(cache_key)
            if cached_result is not None:
                logger.debug(f"Cache HIT for swipe history - user: {user_id}")
                return success_response(cached_result, "Swipe history retrieved successfully (cached)")

            history = get_swipe_history(
                get_repository(),
                get_profile_resolver(),
                user_id,
                direction=direction,
                limit=limit,
                before=before
            )

            next_cursor = None
            if len(history) == limit:
                next_cursor = SwipeCursor.from_dict(history[-1]).encode()
            result_data = {'swipes': history, 'count': len(history), 'next_cursor': next_cursor}
            CacheManager.set(cache_key, result_data, ttl=current_app.config['CACHE_TTL'])

            return success_response(result_data, "Swipe history retrieved successfully")

        except ApiError as e:
            return api_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching swipe history: {str(e)}")
            return error_response("Failed to fetch swipe history", 500)
