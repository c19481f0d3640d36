# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service with Multi-Tenant Support

WHY: Secure session management with automatic timeout and revocation.
Tokens are cryptographically secure, hashed in database, and time-limited.

MULTI-TENANT: Sessions capture owner_id and the acting role at creation
time. validate_session turns a bearer token into the TenantContext every
ordering and billing call is scoped by.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage
- 24-hour absolute timeout (SESSION_ABSOLUTE_TIMEOUT)
- 2-hour idle timeout (SESSION_IDLE_TIMEOUT)
- Revocable on logout, password change or account deletion
"""

import secrets
import hashlib
from datetime import timedelta

from ..extensions import db
from ..models import SessionToken, Owner
from ..permissions import MASTER, validate_role
from foodbook.time_utils import utcnow
from .tenant_service import TenantContext


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
SESSION_IDLE_TIMEOUT = timedelta(hours=2)


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    WHY SHA-256 not bcrypt: Tokens are already high-entropy (unlike passwords).
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    owner_id: int,
    role: str = MASTER,
    user_agent: str | None = None,
    ip_address: str | None = None
) -> tuple[SessionToken, str]:
    """
    Create new session token for an owner acting in `role`.

    Returns (session_record, plaintext_token).
    Raises ValueError if the owner is missing or deactivated.
    """
    validate_role(role)

    owner = db.session.get(Owner, owner_id)
    if not owner:
        raise ValueError("Owner not found")
    if not owner.is_active:
        raise ValueError("Owner account is not active")

    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        owner_id=owner_id,
        role=role,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + SESSION_ABSOLUTE_TIMEOUT,
        user_agent=user_agent,
        ip_address=ip_address,
        is_revoked=False
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason


def validate_session(token: str) -> TenantContext | None:
    """
    Validate session token and return its TenantContext if valid.

    Returns None if:
    - Token is invalid, expired, or revoked
    - Session has been idle for longer than SESSION_IDLE_TIMEOUT
    - Owner account is deactivated or deleted

    Updates last_used_at on successful validation.
    """
    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        return None

    if now - session.last_used_at > SESSION_IDLE_TIMEOUT:
        _revoke(session, "Idle timeout")
        db.session.commit()
        return None

    owner = session.owner
    if not owner or not owner.is_active:
        _revoke(session, "Owner account deactivated")
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()

    return TenantContext(owner_id=owner.id, owner_email=owner.email, role=session.role)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """
    Revoke session token.

    Returns True if session was revoked, False if not found.
    """
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False
    ).first()

    if not session:
        return False

    _revoke(session, reason)
    db.session.commit()
    return True


def revoke_all_owner_sessions(owner_id: int, reason: str = "Revoke all sessions", *, role: str | None = None) -> int:
    """
    Revoke all active sessions for an owner, optionally only those of one role.

    Returns count of sessions revoked.
    """
    query = db.session.query(SessionToken).filter_by(owner_id=owner_id, is_revoked=False)
    if role is not None:
        query = query.filter_by(role=role)

    count = 0
    for session in query.all():
        _revoke(session, reason)
        count += 1

    db.session.commit()
    return count
