"""
Credentials: bcrypt password hashes and HS256 access tokens.

The signing key lives in a TokenIssuer built from Config at startup and handed
to the HTTP app; nothing here reads the environment.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

JWT_ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes; bcrypt>=5 refuses longer input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password_hash: str, password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


class TokenIssuer:
    def __init__(self, secret: str, ttl_minutes: int = 60):
        if not secret:
            raise ValueError("token secret is empty")
        self._secret = secret
        self._ttl = timedelta(minutes=ttl_minutes)

    def create_token(self, user_id: int, login: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "login": login,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def decode_token(self, token: str) -> Optional[dict]:
        """
        Decode and validate a token.

        Returns:
            Decoded payload if valid, None if invalid/expired.
        """
        try:
            return jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None
