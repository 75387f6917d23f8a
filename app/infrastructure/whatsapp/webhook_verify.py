from __future__ import annotations

import hashlib
import hmac
import logging


logger = logging.getLogger(__name__)

_DEV_ENVS = {"dev", "local", "test"}


def verify_handshake(mode: str | None, token: str | None, challenge: str | None, expected_token: str) -> str | None:
    """Return the challenge to echo back, or None if the subscription request is not ours."""
    if mode == "subscribe" and expected_token and token and hmac.compare_digest(token, expected_token):
        return challenge or ""
    return None


def verify_post_signature(body: bytes, signature_header: str | None, app_secret: str | None, env: str) -> bool:
    """Check Meta's ``X-Hub-Signature-256: sha256=<hex>`` header against the raw body."""
    if not app_secret:
        if env.lower() in _DEV_ENVS:
            logger.warning("No app secret configured; skipping signature check in %s", env)
            return True
        logger.error("Missing app secret for signature verification")
        return False

    if not signature_header or "=" not in signature_header:
        return False

    algo, signature = signature_header.split("=", 1)
    if algo.lower() != "sha256":
        return False

    expected = hmac.new(app_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)
