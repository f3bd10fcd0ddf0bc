"""
Password hashing and opaque bearer tokens.

Passwords are hashed with bcrypt. Tokens are random hex strings mapped to a
user id; they carry no claims and are only meaningful to the store that
issued them. Two stores exist and one is chosen at startup:

- MemoryTokenStore: process-local dict, lost on restart. Expired entries are
  evicted lazily when looked up.
- RedisTokenStore: SETEX keys, so expiry is enforced by Redis itself.
"""

import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import bcrypt
import redis.asyncio as redis

from onboard.core.config import Settings
from onboard.core.logging import get_logger
from onboard.infrastructure.redis_client import create_redis

logger = get_logger(__name__)

BCRYPT_ROUNDS = 12

ACCESS = "access"
EMAIL_VERIFICATION = "verify"
PASSWORD_RESET = "reset"


def _normalize_password(password: str) -> bytes:
    # bcrypt only considers the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_normalize_password(password), salt).decode("utf-8")


def verify_password(password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_normalize_password(password), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("password_hash_invalid")
        return False


def generate_token() -> str:
    return secrets.token_hex(32)


@dataclass
class TokenRecord:
    user_id: int
    kind: str
    expires_at: float


class TokenStore(ABC):
    """Issues and resolves opaque tokens bound to a user id."""

    @abstractmethod
    async def issue(self, user_id: int, kind: str = ACCESS, ttl_seconds: Optional[float] = None) -> str:
        pass

    @abstractmethod
    async def resolve(self, token: str, kind: str = ACCESS) -> Optional[int]:
        """Return the user id for a live token, or None."""
        pass

    @abstractmethod
    async def revoke(self, token: str) -> None:
        pass

    async def close(self) -> None:
        return None


class MemoryTokenStore(TokenStore):
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._tokens: dict[str, TokenRecord] = {}

    async def issue(self, user_id: int, kind: str = ACCESS, ttl_seconds: Optional[float] = None) -> str:
        token = generate_token()
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._tokens[token] = TokenRecord(user_id=user_id, kind=kind, expires_at=self.clock() + ttl)
        return token

    async def resolve(self, token: str, kind: str = ACCESS) -> Optional[int]:
        record = self._tokens.get(token)
        if record is None or record.kind != kind:
            return None
        if self.clock() > record.expires_at:
            del self._tokens[token]
            logger.info("token_expired", kind=kind, user_id=record.user_id)
            return None
        return record.user_id

    async def revoke(self, token: str) -> None:
        self._tokens.pop(token, None)

    def __len__(self) -> int:
        return len(self._tokens)


class RedisTokenStore(TokenStore):
    KEY_PREFIX = "onboard:token:"

    def __init__(self, client: redis.Redis, ttl_seconds: float):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    async def issue(self, user_id: int, kind: str = ACCESS, ttl_seconds: Optional[float] = None) -> str:
        token = generate_token()
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        await self.client.setex(self._key(token), int(ttl), f"{kind}:{user_id}")
        return token

    async def resolve(self, token: str, kind: str = ACCESS) -> Optional[int]:
        value = await self.client.get(self._key(token))
        if not value:
            return None
        stored_kind, _, user_id = value.partition(":")
        if stored_kind != kind:
            return None
        return int(user_id)

    async def revoke(self, token: str) -> None:
        await self.client.delete(self._key(token))

    async def close(self) -> None:
        await self.client.aclose()


def build_token_store(settings: Settings) -> TokenStore:
    """Select the token store once, at startup."""
    ttl = settings.TOKEN_TTL_HOURS * 3600
    if settings.TOKEN_STORE == "redis":
        client = create_redis(settings)
        logger.info("token_store_selected", backend="redis", url=settings.REDIS_URL)
        return RedisTokenStore(client, ttl)
    logger.info("token_store_selected", backend="memory")
    return MemoryTokenStore(ttl)
