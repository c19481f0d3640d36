# Overview: Pytest coverage for order status transitions and bill settlement.

"""
Order Lifecycle Tests

Verifies:
- Only Pending -> Completed -> Paid and Pending -> Cancelled are legal
- Cancelling returns reserved stock
- Closing a bill pays every Completed order of the seat, once
"""

import pytest

from foodbook.errors import InvalidTransition, NoOrdersFound, NotFound
from foodbook.models import Order, Product
from foodbook.models.orders import PENDING, COMPLETED, CANCELLED, PAID
from foodbook.services import lifecycle_service, order_service
from foodbook.validation import ValidationError


def _place(product, seat="A1", quantity=1):
    return order_service.create_order(seat, [{"product_id": product.id, "quantity": quantity}])


class TestTransitionTable:

    @pytest.mark.parametrize("from_status,to_status", [
        (PENDING, COMPLETED),
        (PENDING, CANCELLED),
        (COMPLETED, PAID),
        (PAID, PAID),
    ])
    def test_allowed(self, from_status, to_status):
        assert lifecycle_service.can_transition(from_status, to_status)

    @pytest.mark.parametrize("from_status,to_status", [
        (COMPLETED, PENDING),
        (COMPLETED, CANCELLED),
        (PENDING, PAID),
        (PAID, PENDING),
        (PAID, CANCELLED),
        (CANCELLED, PENDING),
        (CANCELLED, COMPLETED),
    ])
    def test_forbidden(self, from_status, to_status):
        assert not lifecycle_service.can_transition(from_status, to_status)

    @pytest.mark.parametrize("terminal", sorted(lifecycle_service.TERMINAL_STATUSES))
    def test_terminal_statuses_are_final(self, terminal):
        others = [s for s in lifecycle_service.VALID_STATUSES if s != terminal]
        assert not any(lifecycle_service.can_transition(terminal, s) for s in others)

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            lifecycle_service.validate_status("Served")


class TestSetStatus:

    def test_pending_to_completed(self, db_session, tenant_a, owner_a, make_product):
        order = _place(make_product(owner_a, stock=5))

        updated = lifecycle_service.set_status(tenant_a, order.id, COMPLETED)

        assert updated.status == COMPLETED

    def test_same_status_is_noop(self, db_session, tenant_a, owner_a, make_product):
        order = _place(make_product(owner_a, stock=5))
        version = order.version_id

        updated = lifecycle_service.set_status(tenant_a, order.id, PENDING)

        assert updated.status == PENDING
        assert updated.version_id == version

    def test_illegal_transition(self, db_session, tenant_a, owner_a, make_product):
        order = _place(make_product(owner_a, stock=5))
        lifecycle_service.set_status(tenant_a, order.id, COMPLETED)

        with pytest.raises(InvalidTransition) as exc:
            lifecycle_service.set_status(tenant_a, order.id, PENDING)

        assert exc.value.details == {"order_id": order.id, "from": COMPLETED, "to": PENDING}

    def test_cancel_releases_stock(self, db_session, tenant_a, owner_a, make_product):
        coke = make_product(owner_a, stock=5)
        order = _place(coke, quantity=3)

        lifecycle_service.set_status(tenant_a, order.id, CANCELLED)

        db_session.expire_all()
        assert db_session.get(Product, coke.id).stock == 5
        assert db_session.get(Order, order.id).status == CANCELLED

    def test_cancel_after_product_deleted(self, db_session, tenant_a, owner_a, make_product):
        from foodbook.services import products_service

        coke = make_product(owner_a, stock=5)
        order = _place(coke, quantity=2)
        products_service.delete_product(tenant_a, coke.id)

        updated = lifecycle_service.set_status(tenant_a, order.id, CANCELLED)

        assert updated.status == CANCELLED
        assert updated.lines[0].product_id is None
        assert updated.lines[0].name == "Coke"

    def test_other_tenant_is_not_found(self, db_session, tenant_b, owner_a, make_product):
        order = _place(make_product(owner_a, stock=5))

        with pytest.raises(NotFound):
            lifecycle_service.set_status(tenant_b, order.id, COMPLETED)

        db_session.expire_all()
        assert db_session.get(Order, order.id).status == PENDING


class TestCloseBill:

    def test_pays_completed_orders_only(self, db_session, tenant_a, owner_a, make_product):
        coke = make_product(owner_a, stock=10)
        done_1 = _place(coke)
        done_2 = _place(coke)
        still_pending = _place(coke)
        other_seat = _place(coke, seat="B2")
        for order in (done_1, done_2, other_seat):
            lifecycle_service.set_status(tenant_a, order.id, COMPLETED)

        count = lifecycle_service.close_bill(tenant_a, "A1")

        assert count == 2
        db_session.expire_all()
        assert db_session.get(Order, done_1.id).status == PAID
        assert db_session.get(Order, done_2.id).status == PAID
        assert db_session.get(Order, still_pending.id).status == PENDING
        assert db_session.get(Order, other_seat.id).status == COMPLETED

    def test_no_completed_orders(self, db_session, tenant_a, owner_a):
        with pytest.raises(NoOrdersFound):
            lifecycle_service.close_bill(tenant_a, "A1")

    def test_second_close_finds_nothing(self, db_session, tenant_a, owner_a, make_product):
        order = _place(make_product(owner_a, stock=10))
        lifecycle_service.set_status(tenant_a, order.id, COMPLETED)

        assert lifecycle_service.close_bill(tenant_a, "A1") == 1
        with pytest.raises(NoOrdersFound):
            lifecycle_service.close_bill(tenant_a, "A1")

    def test_paid_orders_are_immutable(self, db_session, tenant_a, owner_a, make_product):
        order = _place(make_product(owner_a, stock=10))
        lifecycle_service.set_status(tenant_a, order.id, COMPLETED)
        lifecycle_service.close_bill(tenant_a, "A1")

        with pytest.raises(InvalidTransition):
            lifecycle_service.set_status(tenant_a, order.id, CANCELLED)

    def test_other_tenant_seat_untouched(self, db_session, tenant_a, tenant_b, owner_a, make_product):
        order = _place(make_product(owner_a, stock=10))
        lifecycle_service.set_status(tenant_a, order.id, COMPLETED)

        with pytest.raises(NoOrdersFound):
            lifecycle_service.close_bill(tenant_b, "A1")

        db_session.expire_all()
        assert db_session.get(Order, order.id).status == COMPLETED
