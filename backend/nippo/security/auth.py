"""Session tokens (HS256 JWT) and actor extraction.

Design:
- Bearer JWT tokens signed with NIPPO_JWT_SECRET.
- Claims carry the actor: role, employee_id, manager_id.
- Any token problem means "no actor"; the policy turns that into UNAUTHORIZED,
  so the 401-before-403 ordering lives in one place.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Any, Optional

from fastapi import Request

from nippo.core.env import require_env
from nippo.security.policy import Actor
from nippo.security.roles import parse_role


JWT_SECRET_ENV = "NIPPO_JWT_SECRET"
SESSION_COOKIE = "nippo_session"

logger = logging.getLogger("nippo")


class TokenError(ValueError):
    """Token could not be verified or does not describe a valid actor."""


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _get_jwt_secret() -> bytes:
    return require_env(JWT_SECRET_ENV).encode("utf-8")


def _hmac_sha256(key: bytes, msg: bytes) -> bytes:
    return hmac.new(key, msg, hashlib.sha256).digest()


def encode_jwt(claims: dict[str, Any], *, secret: Optional[bytes] = None) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64url_encode(
        json.dumps(claims, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    )
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = _hmac_sha256(secret or _get_jwt_secret(), signing_input)
    return f"{header_b64}.{payload_b64}.{_b64url_encode(sig)}"


def decode_and_verify_jwt(token: str) -> dict[str, Any]:
    """Verify HS256 signature and the claims an actor needs.

    Required claims: sub, role. Optional: employee_id, manager_id, exp.
    """
    # Headers and cookies arrive latin-1 decoded; a JWT is base64url text only.
    if not token.isascii():
        raise TokenError("Invalid token format.")
    try:
        header_b64, payload_b64, sig_b64 = token.split(".")
    except ValueError as e:
        raise TokenError("Invalid token format.") from e

    try:
        signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
        expected_sig = _b64url_encode(_hmac_sha256(_get_jwt_secret(), signing_input))
        signature_ok = hmac.compare_digest(expected_sig, sig_b64)
    except (UnicodeError, TypeError) as e:
        raise TokenError("Invalid token format.") from e
    if not signature_ok:
        raise TokenError("Invalid token signature.")

    try:
        header = json.loads(_b64url_decode(header_b64))
        payload = json.loads(_b64url_decode(payload_b64))
    except Exception as e:  # noqa: BLE001
        raise TokenError("Invalid token encoding.") from e

    if header.get("alg") != "HS256" or header.get("typ") != "JWT":
        raise TokenError("Unsupported token header.")

    exp = payload.get("exp")
    if exp is not None:
        try:
            exp_i = int(exp)
        except (TypeError, ValueError) as e:
            raise TokenError("Invalid exp claim.") from e
        if int(time.time()) >= exp_i:
            raise TokenError("Token expired.")

    if "sub" not in payload or "role" not in payload:
        raise TokenError("Missing required claims.")

    return payload


def token_fingerprint(token: str) -> str:
    """Non-reversible token fingerprint for audit logs."""
    raw = hashlib.sha256(token.encode("utf-8")).digest()
    return _b64url_encode(raw[:18])


def _optional_int(claims: dict[str, Any], key: str) -> Optional[int]:
    v = claims.get(key)
    if v is None:
        return None
    if isinstance(v, bool):
        raise TokenError(f"Invalid {key} claim.")
    try:
        return int(v)
    except (TypeError, ValueError) as e:
        raise TokenError(f"Invalid {key} claim.") from e


def actor_from_token(token: str) -> Actor:
    claims = decode_and_verify_jwt(token)
    try:
        role = parse_role(claims["role"])
    except Exception as e:  # noqa: BLE001
        raise TokenError("Invalid role claim.") from e

    sub = str(claims["sub"])
    if not sub:
        raise TokenError("Invalid sub claim.")

    return Actor(
        role=role,
        employee_id=_optional_int(claims, "employee_id"),
        manager_id=_optional_int(claims, "manager_id"),
        sub=sub,
        token_fingerprint=token_fingerprint(token),
    )


def _extract_token(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization")
    if auth:
        if not auth.lower().startswith("bearer "):
            return None
        return auth.split(" ", 1)[1].strip() or None
    return request.cookies.get(SESSION_COOKIE) or None


def maybe_get_actor(request: Request) -> Optional[Actor]:
    """Resolve the request's actor, or None when there is no valid session."""
    token = _extract_token(request)
    if token is None:
        return None
    try:
        return actor_from_token(token)
    except TokenError as e:
        logger.info(json.dumps({"event": "token_rejected", "reason": str(e)}))
        return None
