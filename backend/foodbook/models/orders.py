from __future__ import annotations

from ..extensions import db
from foodbook.time_utils import to_utc_z

PENDING = "Pending"
COMPLETED = "Completed"
CANCELLED = "Cancelled"
PAID = "Paid"


def compute_tax(subtotal: int, rate_percent: int) -> int:
    """Tax in whole units, rounded half-up (integer math, no float drift)."""
    if not rate_percent:
        return 0
    return (subtotal * rate_percent + 50) // 100


class Order(db.Model):
    """
    One ordering transaction for a seat.

    Lines are snapshots (name and unit price copied at order time), so later
    menu edits never change an existing order.

    Invariant: total_amount == subtotal + tax_amount, and
    subtotal == sum(line.quantity * line.unit_price).

    version_id guards concurrent bill edits: a stale writer gets
    StaleDataError and is retried by run_with_retry.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_owner_seat_status", "owner_id", "seat_number", "status"),
        db.Index("ix_orders_owner_created", "owner_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("owners.id"), nullable=False, index=True)
    seat_number = db.Column(db.String(32), nullable=False)

    status = db.Column(db.String(16), nullable=False, default=PENDING, index=True)

    subtotal = db.Column(db.Integer, nullable=False, default=0)
    # Rate snapshotted at creation so bill edits recompute with the same rule
    tax_rate_percent = db.Column(db.Integer, nullable=False, default=0)
    tax_amount = db.Column(db.Integer, nullable=False, default=0)
    total_amount = db.Column(db.Integer, nullable=False, default=0)

    note = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )
    version_id = db.Column(db.Integer, nullable=False, default=1)

    owner = db.relationship("Owner", backref=db.backref("orders", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Order id={self.id} seat={self.seat_number!r} status={self.status}>"

    def recalculate_totals(self) -> None:
        self.subtotal = sum(line.quantity * line.unit_price for line in self.lines)
        self.tax_amount = compute_tax(self.subtotal, self.tax_rate_percent)
        self.total_amount = self.subtotal + self.tax_amount

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "seat_number": self.seat_number,
            "status": self.status,
            "items": [line.to_dict() for line in self.lines],
            "subtotal": self.subtotal,
            "tax_rate_percent": self.tax_rate_percent,
            "tax_amount": self.tax_amount,
            "total_amount": self.total_amount,
            "note": self.note,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class OrderLine(db.Model):
    """Individual line item on an order (denormalized snapshot)."""
    __tablename__ = "order_lines"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_order_lines_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    # Weak reference: used for stock reconciliation only, nulled when the product is deleted
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Integer, nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    order = db.relationship(
        "Order",
        backref=db.backref(
            "lines",
            lazy=True,
            order_by="OrderLine.position",
            cascade="all, delete-orphan",
        ),
    )

    @property
    def line_total(self) -> int:
        return self.quantity * self.unit_price

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": self.unit_price,
            "total": self.line_total,
        }
