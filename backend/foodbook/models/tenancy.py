from __future__ import annotations

from ..extensions import db
from foodbook.time_utils import to_utc_z


class Owner(db.Model):
    """
    Restaurant owner account and tenant root.

    MULTI-TENANT: Every product, order, role credential and session row
    references owners.id. The email is the tenant key shown to callers.
    """
    __tablename__ = "owners"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    company_name = db.Column(db.String(120), nullable=True)

    # Optional password login; OTP login works without one
    password_hash = db.Column(db.String(255), nullable=True)

    # True once every staff role password differs from the default
    has_set_password = db.Column(db.Boolean, nullable=False, default=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Owner id={self.id} email={self.email!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "company_name": self.company_name,
            "has_password": self.password_hash is not None,
            "has_set_password": self.has_set_password,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
