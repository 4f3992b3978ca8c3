# decorops/auth.py
"""
Tenant identification. A tenant logs in with name and password and gets a
signed token; every other route resolves the tenant id from that token.
Rotating a tenant's token salt (password reset) revokes all its tokens.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError
from flask import abort, g, request
from sqlalchemy import select

from .config import config
from .db import SessionLocal
from .models import Tenant

logger = logging.getLogger(__name__)

_ph = PasswordHasher()
_ALGORITHM = "HS256"

def normalise_tenant_name(name: str) -> str:
    return (name or "").strip().upper()

def hash_password(pw: str) -> str:
    return _ph.hash(pw)

def verify_password(phash: str, pw: str) -> bool:
    try:
        return _ph.verify(phash, pw)
    except (VerifyMismatchError, InvalidHashError):
        return False

def authenticate(s, name: str, password: str) -> Optional[Tenant]:
    """Return the tenant if the credentials match, else None.

    Upgrades the stored hash when argon2 parameters have changed.
    """
    tenant = s.execute(
        select(Tenant).where(Tenant.name == normalise_tenant_name(name))
    ).scalar_one_or_none()
    if tenant is None or not verify_password(tenant.password_hash, password):
        return None
    if _ph.check_needs_rehash(tenant.password_hash):
        tenant.password_hash = hash_password(password)
    tenant.last_seen_at = datetime.now(timezone.utc)
    return tenant

def issue_token(tenant_id: int, token_salt: str) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(tenant_id),
        "salt": token_salt,
        "iat": now,
        "exp": now + config.TOKEN_TTL,
    }
    return jwt.encode(claims, config.DECOROPS_JWT_SECRET, algorithm=_ALGORITHM)

def _claims_from_header() -> dict:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme != "Bearer" or not token.strip():
        abort(401, description="Missing bearer token")
    try:
        return jwt.decode(token.strip(), config.DECOROPS_JWT_SECRET, algorithms=[_ALGORITHM])
    except jwt.ExpiredSignatureError:
        abort(401, description="Token expired")
    except jwt.PyJWTError:
        abort(401, description="Invalid token")

def require_tenant() -> int:
    """Tenant id of the current request, or abort with 401."""
    if "tenant_id" in g:
        return g.tenant_id
    claims = _claims_from_header()
    try:
        tenant_id = int(claims["sub"])
    except (KeyError, ValueError):
        abort(401, description="Invalid token")
    with SessionLocal() as s:
        tenant = s.get(Tenant, tenant_id)
        if tenant is None or (tenant.token_salt or "") != claims.get("salt", ""):
            logger.warning("rejected token for tenant %s", tenant_id)
            abort(401, description="Token no longer valid")
    g.tenant_id = tenant_id
    return tenant_id
