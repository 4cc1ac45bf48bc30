"""Personal access token verification against stored digests.

Only the SHA-256 hex digest of each user's current PAT is kept in the store.
Verification hashes the presented token and compares digests in constant
time. Every failure mode (unknown user, mismatch, store fault) yields False.
"""

from __future__ import annotations

import hashlib
import hmac
import logging

from activity_connector.adapters.store.base import AbstractActivityStore
from activity_connector.adapters.store.keys import credential_key
from activity_connector.core.config import RedisSettings

logger = logging.getLogger(__name__)

DIGEST_ALGORITHM = "sha256"


def hash_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of a token.

    Examples:
        >>> hash_token("abc")[:16]
        'ba7816bf8f01cfea'
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class CredentialVerifier:
    """Decide whether a presented PAT belongs to a username."""

    def __init__(
        self,
        store: AbstractActivityStore,
        *,
        redis_settings: RedisSettings | None = None,
    ) -> None:
        self._store = store
        self._redis_settings = redis_settings

    async def verify(self, username: str, presented_token: str) -> bool:
        """Check ``presented_token`` against the digest stored for ``username``.

        Args:
            username: User the caller claims to be.
            presented_token: Raw PAT from the Authorization header.

        Returns:
            True only when a digest is stored and matches the token's digest.
        """
        if not username or not presented_token:
            return False

        stored = await self._store.get_value(credential_key(username, self._redis_settings))
        if stored.degraded:
            logger.warning(
                "credential.lookup_failed",
                extra={"username": username, "error_msg": stored.error},
            )
            return False

        if stored.value is None:
            logger.debug("credential.invalid", extra={"username": username, "reason": "not_found"})
            return False

        is_valid = hmac.compare_digest(
            stored.value.encode("utf-8"),
            hash_token(presented_token).encode("utf-8"),
        )
        logger.debug(
            "credential.checked",
            extra={"username": username, "valid": is_valid},
        )
        return is_valid
