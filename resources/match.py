import logging
from middleware.auth import token_required, current_user_id
from flask_restful import Resource
from flask import current_app
from repositories import get_repository
from utils.errors import ApiError
from utils.matching import get_matches
from utils.profiles import get_profile_resolver
from utils.response import success_response, error_response, api_error_response
from utils.cache import CacheManager, build_matches_list_cache_key

logger = logging.getLogger(__name__)


class UserMatchesResource(Resource):
    """Resource for getting user's current matches"""

    @token_required
    def get(self):
        """Get all active matches for the current user, most recent first"""
        try:
            user_id = current_user_id()

            cache_key = build_matches_list_cache_key(user_id)
            cached_result = CacheManager.get(cache_key)
            if cached_result is not None:
                logger.debug(f"Cache HIT for matches - user: {user_id}")
                return success_response(cached_result, "Matches retrieved successfully (cached)")

            matches_data = get_matches(get_repository(), get_profile_resolver(), user_id)

            result_data = {'matches': matches_data, 'count': len(matches_data)}
            CacheManager.set(cache_key, result_data, ttl=current_app.config['CACHE_TTL'])

            return success_response(result_data, "Matches retrieved successfully")

        except ApiError as e:
            return api_error_response(e)
        except Exception as e:
            logger.error(f"Error fetching matches: {str(e)}")
            return error_response("Failed to fetch matches", 500)
