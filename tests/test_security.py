import asyncio
import time

import bcrypt

from app.core.security import SecurityService, dummy_hash
from app.core.settings import settings


def cost_of(hashed: str) -> int:
    # $2b$<cost>$<salt+hash>
    return int(hashed.split("$")[2])


def test_dummy_hash_uses_configured_cost(monkeypatch):
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 6)
    assert cost_of(dummy_hash(6)) == 6

    security = SecurityService()
    real = asyncio.run(security.hash_password("secret123"))
    assert cost_of(real) == cost_of(dummy_hash(settings.BCRYPT_ROUNDS))


def test_unknown_email_costs_as_much_as_wrong_password(monkeypatch):
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 10)
    security = SecurityService()
    real = bcrypt.hashpw(b"secret123", bcrypt.gensalt(rounds=10)).decode("utf-8")

    def timed(hashed):
        start = time.perf_counter()
        assert asyncio.run(security.verify_password("wrong-password", hashed)) is False
        return time.perf_counter() - start

    wrong_password = min(timed(real) for _ in range(3))
    unknown_email = min(timed(None) for _ in range(3))
    assert unknown_email > wrong_password / 3
