from __future__ import annotations

from ..extensions import db
from foodbook.time_utils import to_utc_z


class SessionToken(db.Model):
    """
    Bearer session for an owner acting in one role.

    MULTI-TENANT: owner_id is captured at creation and never changes.
    Only the SHA-256 hash of the token is stored.
    """
    __tablename__ = "session_tokens"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("owners.id"), nullable=False, index=True)
    role = db.Column(db.String(16), nullable=False, default="master")

    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(255), nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)

    owner = db.relationship("Owner", backref=db.backref("sessions", lazy=True, cascade="all, delete-orphan"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }


class OneTimeCode(db.Model):
    """Email OTP for login, signup and step-up checks. Stored hashed."""
    __tablename__ = "one_time_codes"
    __table_args__ = (
        db.Index("ix_otp_email_purpose", "email", "purpose"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False)
    purpose = db.Column(db.String(32), nullable=False)
    code_hash = db.Column(db.String(64), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())


class RoleCredential(db.Model):
    """Per-tenant password for one staff role (chief, billing, inventory, menu, master)."""
    __tablename__ = "role_credentials"
    __table_args__ = (
        db.UniqueConstraint("owner_id", "role", name="uq_role_credentials_owner_role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("owners.id"), nullable=False, index=True)
    role = db.Column(db.String(16), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    # Still the factory default password
    is_default = db.Column(db.Boolean, nullable=False, default=True)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    owner = db.relationship("Owner", backref=db.backref("role_credentials", lazy=True, cascade="all, delete-orphan"))

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "is_default": self.is_default,
            "updated_at": to_utc_z(self.updated_at),
        }
