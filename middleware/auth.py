import logging
from functools import wraps
from flask import request, current_app
import jwt
from utils.response import error_response

logger = logging.getLogger(__name__)


class AuthMiddleware:
    def token_required(self, f):
        @wraps(f)
        def decorated(*args, **kwargs):
            auth_header = request.headers.get("Authorization", "")

            if not auth_header.startswith("Bearer "):
                logger.warning("Missing or malformed Authorization header")
                return error_response("Unauthorized - No Bearer token", 401)

            token = auth_header.split("Bearer ")[1]
            secret = current_app.config.get('JWT_SECRET')
            audience = current_app.config.get('JWT_AUDIENCE')

            if not secret:
                logger.error("JWT_SECRET is missing")
                return error_response("Server misconfigured", 500)

            try:
                payload = jwt.decode(
                    token,
                    key=secret,
                    algorithms=[current_app.config.get('JWT_ALGORITHM', 'HS256')],
                    audience=audience,
                    options={"verify_exp": True, "verify_aud": audience is not None, "require": ["sub"]},
                    leeway=60  # Allow 60 seconds of clock skew
                )
            except jwt.ExpiredSignatureError:
                logger.warning("JWT token expired")
                return error_response("Token expired", 401)
            except jwt.InvalidTokenError as e:
                logger.warning("Invalid JWT token: %s", str(e))
                return error_response("Invalid token", 401)

            request.user = payload
            logger.debug("JWT validated for user: %s", payload.get("sub"))

            return f(*args, **kwargs)

        return decorated


def current_user_id() -> str:
    """Subject of the token validated for this request"""
    return request.user.get('sub')


# Global instance
auth_middleware = AuthMiddleware()
token_required = auth_middleware.token_required
