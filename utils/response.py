from typing import Any, Dict, Optional

def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Standard success response format for Flask-RESTful"""
    response = {
        "success": True,
        "message": message,
        "data": data
    }
    return response, status_code

def error_response(message: str = "Error", status_code: int = 400, details: Optional[Dict] = None):
    """Standard error response format for Flask-RESTful"""
    response = {
        "success": False,
        "error": {
            "message": message,
            "code": status_code,
            "details": details or {}
        }
    }
    return response, status_code

def api_error_response(error):
    """Render an ApiError raised by the swipe/match core"""
    details = dict(error.details)
    details.setdefault('reason', error.reason)
    return error_response(error.message, error.status_code, details)
