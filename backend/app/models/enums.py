"""
Principal roles enumeration.

Roles are issued by the external identity service and carried in the JWT.
"""

import enum


class UserRole(str, enum.Enum):
    """
    Principal role enumeration.

    Roles:
        ADMIN: Back-office administrator, sees every city
        DIRECTOR: City director, limited to the cities listed in the token
    """
    ADMIN = "ADMIN"
    DIRECTOR = "DIRECTOR"
