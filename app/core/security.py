from datetime import timedelta
from functools import lru_cache
from typing import Any, Dict

import bcrypt
import jwt

from app.core.settings import settings
from app.libs.formats.datetime import now_tzinfo


@lru_cache(maxsize=None)
def dummy_hash(rounds: int) -> str:
    """Compared against when the email is unknown so a failed login costs the same
    bcrypt work either way; built at the cost factor real hashes use."""
    return bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=rounds)).decode("utf-8")


class SecurityService:
    def __init__(self):
        self.secret_key = settings.SECRET_KEY
        self.algorithm = settings.ALGORITHM
        self.access_token_expire_minutes = float(settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.bcrypt_rounds = settings.BCRYPT_ROUNDS
        dummy_hash(self.bcrypt_rounds)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False

    # 🔐 JWT
    async def create_access_token(self, sub: str) -> str:
        issued_at = now_tzinfo()
        expire = issued_at + timedelta(minutes=self.access_token_expire_minutes)
        payload: Dict[str, Any] = {"sub": sub, "iat": issued_at, "exp": expire}
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return str(token)

    async def decode_access_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise ValueError("Token expired")
        except jwt.InvalidTokenError:
            raise ValueError("Invalid token")

    # 🔑 PASSWORD
    async def hash_password(self, plain: str) -> str:
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    async def verify_password(plain: str, hashed: str | None) -> bool:
        try:
            return bcrypt.checkpw(
                plain.encode("utf-8"), (hashed or dummy_hash(settings.BCRYPT_ROUNDS)).encode("utf-8")
            )
        except ValueError:
            return False
