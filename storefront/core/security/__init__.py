from .jwt_handler import create_access_token, token_subject, verify_access_token
from .rate_limiter import limiter, user_id_or_ip
from .dependencies import authenticate_token, ensure_admin, get_current_user, require_admin

__all__ = [
    "create_access_token",
    "token_subject",
    "verify_access_token",
    "authenticate_token",
    "ensure_admin",
    "get_current_user",
    "require_admin",
    "limiter",
    "user_id_or_ip"
]
