from travel_api.models.refresh_token import RefreshToken
from travel_api.models.revoked_token import RevokedToken
from travel_api.models.user import User

__all__ = [
    "RefreshToken",
    "RevokedToken",
    "User",
]
