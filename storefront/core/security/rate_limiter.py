from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from storefront.core import config


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.

    Limited routes all depend on ``get_current_user``, which has already
    stored the caller's id on ``request.state`` by the time the limit is
    checked. Anonymous requests are keyed by client address.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=user_id_or_ip, enabled=config.RATE_LIMIT_ENABLED)
