# pavilion/utils/check_roles.py
from fastapi import HTTPException
from typing import Callable, Iterable
from functools import wraps


def require_role(roles: Iterable[str]):
    """
    Gate a route to the given roles.

    The route must declare `_user=Depends(get_current_user)`; back-office routes pass
    ADMIN_ROLES and the B2B portal passes CUSTOMER_ROLES.
    """
    allowed = {r.lower() for r in roles}

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, _user, **kwargs):
            if _user is None:
                raise HTTPException(status_code=401, detail="User not authenticated")
            if _user.role.lower() not in allowed:
                raise HTTPException(
                    status_code=403,
                    detail=f"Role '{_user.role}' cannot access this resource",
                )
            return await func(*args, _user=_user, **kwargs)
        return wrapper
    return decorator
