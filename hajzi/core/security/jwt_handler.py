"""
Bearer token handling.

Hajzi does not issue credentials itself; it trusts HS256 access tokens
signed with JWT_SECRET_KEY whose ``user_id`` claim names an active user.
``create_access_token`` exists for operators and tests.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from hajzi.config.settings import settings
from hajzi.core.logging import get_logger

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"


class JWTManager:

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ):
        self.secret_key = secret_key or settings.JWT_SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.lifetime = timedelta(minutes=access_token_expire_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    def create_access_token(
        self,
        user_id: str,
        additional_claims: Optional[Dict[str, Any]] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        issued_at = datetime.now(timezone.utc)
        claims: Dict[str, Any] = dict(additional_claims or {})
        claims.update(
            user_id=str(user_id),
            token_type=ACCESS_TOKEN_TYPE,
            iat=issued_at,
            exp=issued_at + (self.lifetime if expires_delta is None else expires_delta),
            jti=secrets.token_hex(16),
        )
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Decode an access token and return its claims.

        Raises:
            jwt.ExpiredSignatureError: Token is past its ``exp``
            jwt.InvalidTokenError: Bad signature, malformed, or not an access token
        """
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected bearer token: {type(e).__name__}")
            raise

        if claims.get("token_type") != ACCESS_TOKEN_TYPE or not claims.get("user_id"):
            raise jwt.InvalidTokenError("Token is not an access token")
        return claims


def get_jwt_manager() -> JWTManager:
    return JWTManager()
