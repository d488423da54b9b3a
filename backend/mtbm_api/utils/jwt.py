"""JWT Token Issuing and Validation (HS256, shared secret)"""
import jwt
from typing import Any, Dict, TYPE_CHECKING
from datetime import datetime, timedelta, timezone

from ..config.settings import Settings
from ..domain.errors import AuthenticationError
from .logger import get_logger

if TYPE_CHECKING:
    from ..domain.models import User

logger = get_logger(__name__)


class TokenService:
    """Issues and validates the bearer tokens handed out at login"""

    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self._lifetime = timedelta(days=settings.jwt_expires_days)

    def issue(self, user: "User") -> str:
        """
        Sign a token for a user

        Args:
            user: Account the token is issued to; its id becomes ``sub``

        Returns:
            Encoded JWT
        """
        now = datetime.now(timezone.utc)
        claims = {
            "sub": user.id,
            "role": user.role,
            "email": user.email,
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Validate a token and return its claims

        Raises:
            AuthenticationError: If the token is missing, malformed or expired
        """
        if not token:
            raise AuthenticationError("Token is missing")

        if token.startswith("Bearer "):
            token = token[7:]

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
            raise AuthenticationError("Token has expired")
        except jwt.PyJWTError as e:
            logger.info(f"Rejected invalid token: {e}")
            raise AuthenticationError("Invalid token")

        return claims
