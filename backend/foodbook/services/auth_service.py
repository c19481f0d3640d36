# Overview: Service-layer operations for auth; owner accounts, passwords and email OTP.

"""
Owner Authentication Service

WHY: Owners sign up and log in with an emailed one-time code; a password
can be added later for faster login. The identity that comes out of either
path is the tenant every ordering and billing call is scoped to.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost from BCRYPT_ROUNDS, default 12)
- Owner passwords: at least 8 characters with a letter, a digit and a
  special character
- OTP codes are 6 digits, stored as SHA-256 hashes, valid for
  OTP_TTL_MINUTES and single use
- Requesting a new code invalidates every earlier code for that email
"""

import re
import secrets
from datetime import timedelta

import bcrypt
from flask import current_app

from ..errors import NotFound, Unauthorized
from ..extensions import db
from ..models import Owner, OneTimeCode, Order, OrderLine, Product, RoleCredential, SessionToken
from foodbook.time_utils import utcnow
from . import email_service
from .session_service import hash_token
from .tenant_service import TenantContext

OTP_PURPOSES = ("login", "signup", "security", "delete_account")


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


class AccountError(Exception):
    """Raised for account lookups that contradict the requested flow."""
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


def normalize_email(email: str) -> str:
    if not email or "@" not in email:
        raise AccountError("InvalidEmail", "A valid email address is required")
    return email.strip().lower()


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[a-zA-Z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one number")

    if not re.search(r'[!@#$%^&*(),.?":{}|<>]', password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Hash password using bcrypt. Strength is the caller's concern."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds))
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def get_owner_by_email(email: str) -> Owner | None:
    return db.session.query(Owner).filter_by(email=normalize_email(email)).first()


# -- One-time codes --

def issue_otp(email: str, purpose: str = "login") -> dict:
    """
    Create and send a one-time code.

    Returns {"mode": "smtp"} when mailed, or {"mode": "dev", "code": ...}
    when SMTP is not configured so local setups can still log in.

    Raises AccountError UserNotFound / UserExists when the purpose does not
    fit the account state.
    """
    if purpose not in OTP_PURPOSES:
        raise AccountError("InvalidPurpose", f"Unknown OTP purpose '{purpose}'")

    email = normalize_email(email)
    exists = get_owner_by_email(email) is not None

    if purpose == "signup" and exists:
        raise AccountError("UserExists", "An account with this email already exists")
    if purpose != "signup" and not exists:
        raise AccountError("UserNotFound", "No account with this email")

    code = f"{secrets.randbelow(900000) + 100000}"
    ttl = timedelta(minutes=current_app.config["OTP_TTL_MINUTES"])

    db.session.query(OneTimeCode).filter_by(email=email).delete()
    db.session.add(OneTimeCode(
        email=email,
        purpose=purpose,
        code_hash=hash_token(code),
        expires_at=utcnow() + ttl,
    ))
    db.session.commit()

    if email_service.is_configured():
        email_service.send_otp_email(email, code, purpose)
        return {"mode": "smtp"}

    current_app.logger.info("[DEV MODE] %s OTP for %s: %s", purpose.upper(), email, code)
    return {"mode": "dev", "code": code}


def verify_otp(email: str, purpose: str, code: str) -> None:
    """
    Consume a one-time code.

    Raises Unauthorized when the code is missing, wrong or expired.
    """
    email = normalize_email(email)
    record = db.session.query(OneTimeCode).filter_by(email=email, purpose=purpose).first()

    if record is None:
        raise Unauthorized("Invalid or expired OTP")
    if record.expires_at < utcnow():
        db.session.delete(record)
        db.session.commit()
        raise Unauthorized("OTP Expired")
    if not code or not secrets.compare_digest(record.code_hash, hash_token(str(code).strip())):
        raise Unauthorized("Invalid OTP")

    db.session.delete(record)
    db.session.commit()


# -- Owner accounts --

def create_owner(email: str, company_name: str | None = None) -> Owner:
    email = normalize_email(email)
    if get_owner_by_email(email) is not None:
        raise AccountError("UserExists", "An account with this email already exists")

    owner = Owner(email=email, company_name=(company_name or "").strip() or None)
    db.session.add(owner)
    db.session.commit()
    current_app.logger.info("Owner account created: %s", email)
    return owner


def signup_with_otp(email: str, code: str, company_name: str | None = None) -> Owner:
    verify_otp(email, "signup", code)
    owner = create_owner(email, company_name)
    email_service.send_welcome_email(owner.email)
    return owner


def login_with_otp(email: str, code: str) -> Owner:
    verify_otp(email, "login", code)
    owner = get_owner_by_email(email)
    if owner is None or not owner.is_active:
        raise Unauthorized("Account not found or deactivated")
    return owner


def authenticate(email: str, password: str) -> Owner | None:
    """
    Password login. Returns the Owner if credentials are valid, None otherwise.
    Owners who never set a password can only log in with an OTP.
    """
    try:
        owner = get_owner_by_email(email)
    except AccountError:
        return None
    if owner is None or not owner.is_active:
        return None
    if not verify_password(password, owner.password_hash):
        return None
    return owner


def set_owner_password(tenant: TenantContext, password: str) -> Owner:
    validate_password_strength(password)
    owner = db.session.get(Owner, tenant.owner_id)
    if owner is None:
        raise NotFound("Owner not found")
    owner.password_hash = hash_password(password)
    db.session.commit()
    current_app.logger.info("Password set for owner_id=%s", owner.id)
    return owner


def delete_account(tenant: TenantContext, code: str) -> None:
    """
    Permanently delete a tenant and all of its data after an OTP check.
    """
    verify_otp(tenant.owner_email, "delete_account", code)

    owner_id = tenant.owner_id
    order_ids = db.session.query(Order.id).filter(Order.owner_id == owner_id)
    db.session.query(OrderLine).filter(OrderLine.order_id.in_(order_ids.scalar_subquery())).delete(
        synchronize_session=False
    )
    db.session.query(Order).filter_by(owner_id=owner_id).delete(synchronize_session=False)
    db.session.query(Product).filter_by(owner_id=owner_id).delete(synchronize_session=False)
    db.session.query(RoleCredential).filter_by(owner_id=owner_id).delete(synchronize_session=False)
    db.session.query(SessionToken).filter_by(owner_id=owner_id).delete(synchronize_session=False)
    db.session.query(Owner).filter_by(id=owner_id).delete(synchronize_session=False)
    db.session.commit()

    current_app.logger.info("Account deleted: %s", tenant.owner_email)
