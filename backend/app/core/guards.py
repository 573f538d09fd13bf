"""
Security guards for role-based and city-scope access control.

Provides dependencies for protecting endpoints.
"""

from typing import List, Optional
from fastapi import Depends, HTTPException, status
from backend.app.models.enums import UserRole
from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import CityAccessDeniedError


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/reports/city")
        async def city_report(current_user: dict = Depends(require_role([UserRole.ADMIN]))):
            ...

    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        try:
            user_role = UserRole(current_user.get("role"))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role in token"
            )

        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


require_back_office = require_role([UserRole.ADMIN, UserRole.DIRECTOR])


class CityScopeGuard:
    """
    City-scope guard for directors.

    Admins are unscoped. A director only sees and edits orders whose city is
    listed in the token.

    Usage:
        city_guard = CityScopeGuard()

        @router.get("/orders/{order_id}")
        async def get_order(order_id: int, current_user: dict = Depends(get_current_user)):
            order = ...
            city_guard.enforce(order.city, current_user)
    """

    def allowed_cities(self, current_user: dict) -> Optional[List[str]]:
        """
        Cities to filter queries by, or None when no filtering is needed.
        """
        if current_user.get("role") == UserRole.ADMIN.value:
            return None
        return list(current_user.get("cities") or [])

    def enforce(self, city: Optional[str], current_user: dict):
        """
        Raise CityAccessDeniedError if the city is outside the principal's scope.
        """
        scope = self.allowed_cities(current_user)
        if scope is not None and city not in scope:
            raise CityAccessDeniedError(city or "")

    def clamp(self, requested_city: Optional[str], current_user: dict) -> Optional[List[str]]:
        """
        Resolve a requested city filter against the scope.

        Returns the list of cities to filter by (None = all cities).
        """
        scope = self.allowed_cities(current_user)
        if requested_city and requested_city != "all":
            if scope is not None and requested_city not in scope:
                raise CityAccessDeniedError(requested_city)
            return [requested_city]
        return scope
