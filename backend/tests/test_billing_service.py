# Overview: Pytest coverage for seat bill consolidation and bill edits.

import pytest

from foodbook.errors import ItemNotFound, OutOfStock, InsufficientStock
from foodbook.models import Order, OrderLine, Product
from foodbook.models.orders import COMPLETED, PAID
from foodbook.services import billing_service, lifecycle_service, order_service
from foodbook.validation import ValidationError


@pytest.fixture
def menu(owner_a, make_product):
    return {
        "coke": make_product(owner_a, name="Coke", price=40, stock=20, category="Beverage"),
        "fries": make_product(owner_a, name="Fries", price=80, stock=20, category="Sides"),
    }


def _completed_order(tenant, seat, items, note=None, apply_tax=False):
    order = order_service.create_order(seat, items, note=note, apply_tax=apply_tax)
    return lifecycle_service.set_status(tenant, order.id, COMPLETED)


@pytest.fixture
def seat_a1(db_session, tenant_a, menu):
    """Seat A1 with [Coke] and [Coke, Fries], both Completed."""
    first = _completed_order(tenant_a, "A1", [{"product_id": menu["coke"].id, "quantity": 1}])
    second = _completed_order(
        tenant_a,
        "A1",
        [{"product_id": menu["coke"].id, "quantity": 1}, {"product_id": menu["fries"].id, "quantity": 1}],
        note="table by the window",
    )
    return first, second


class TestGetBill:

    def test_no_bill(self, db_session, tenant_a):
        assert billing_service.get_bill(tenant_a, "A1") is None

    def test_consolidates_completed_orders(self, db_session, tenant_a, seat_a1):
        first, second = seat_a1

        bill = billing_service.get_bill(tenant_a, "A1")

        assert bill["seat_number"] == "A1"
        assert bill["orders_count"] == 2
        assert bill["order_ids"] == [first.id, second.id]
        assert [(i["name"], i["quantity"], i["price"]) for i in bill["items"]] == [
            ("Coke", 1, 40),
            ("Coke", 1, 40),
            ("Fries", 1, 80),
        ]
        assert bill["subtotal"] == 160
        assert bill["tax_total"] == 0
        assert bill["grand_total"] == 160
        assert bill["company_name"] == "Cafe A"
        assert bill["note"] == "table by the window"

    def test_pending_and_paid_orders_excluded(self, db_session, tenant_a, menu, seat_a1):
        order_service.create_order("A1", [{"product_id": menu["coke"].id, "quantity": 5}])

        bill = billing_service.get_bill(tenant_a, "A1")
        assert bill["grand_total"] == 160

        lifecycle_service.close_bill(tenant_a, "A1")
        assert billing_service.get_bill(tenant_a, "A1") is None

    def test_grand_total_is_sum_of_order_totals(self, db_session, tenant_a, menu):
        _completed_order(tenant_a, "A1", [{"product_id": menu["fries"].id, "quantity": 3}], apply_tax=True)
        _completed_order(tenant_a, "A1", [{"product_id": menu["coke"].id, "quantity": 1}])

        bill = billing_service.get_bill(tenant_a, "A1")
        orders = db_session.query(Order).filter_by(seat_number="A1", status=COMPLETED).all()

        assert bill["grand_total"] == sum(o.total_amount for o in orders)
        assert bill["grand_total"] == 240 + 43 + 40
        assert bill["subtotal"] + bill["tax_total"] == bill["grand_total"]

    def test_company_name_fallback(self, db_session, tenant_b, owner_b, make_product):
        burger = make_product(owner_b, name="Burger", price=150, stock=5)
        _completed_order(tenant_b, "1", [{"product_id": burger.id, "quantity": 1}])

        bill = billing_service.get_bill(tenant_b, "1")

        assert bill["company_name"] == "FOODBOOK"
        assert bill["note"] is None

    def test_list_open_seats(self, db_session, tenant_a, menu, seat_a1):
        _completed_order(tenant_a, "B2", [{"product_id": menu["fries"].id, "quantity": 1}])

        seats = billing_service.list_open_seats(tenant_a)

        assert seats == [
            {"seat_number": "A1", "orders_count": 2, "grand_total": 160},
            {"seat_number": "B2", "orders_count": 1, "grand_total": 80},
        ]


class TestRemoveItem:

    def test_removes_from_first_matching_order(self, db_session, tenant_a, seat_a1):
        """Two orders carry a Coke; the oldest loses it and the total drops by 40."""
        first, second = seat_a1
        before = billing_service.get_bill(tenant_a, "A1")["grand_total"]

        result = billing_service.remove_item(tenant_a, "A1", item_name="Coke")

        assert result["order_id"] == first.id
        assert result["order_deleted"] is True
        assert result["restocked"] is False

        bill = billing_service.get_bill(tenant_a, "A1")
        assert bill["grand_total"] == before - 40
        assert bill["order_ids"] == [second.id]
        assert db_session.get(Order, first.id) is None

    def test_decrements_quantity_and_recomputes_tax(self, db_session, tenant_a, menu):
        order = _completed_order(
            tenant_a,
            "A1",
            [{"product_id": menu["fries"].id, "quantity": 3}],
            apply_tax=True,
        )
        assert order.total_amount == 240 + 43

        result = billing_service.remove_item(tenant_a, "A1", item_name="Fries")

        assert result["order_deleted"] is False
        db_session.expire_all()
        order = db_session.get(Order, order.id)
        assert order.lines[0].quantity == 2
        assert order.subtotal == 160
        assert order.tax_amount == 29
        assert order.total_amount == 189

    def test_by_line_id(self, db_session, tenant_a, seat_a1):
        _, second = seat_a1
        coke_line = next(l for l in second.lines if l.name == "Coke")

        result = billing_service.remove_item(tenant_a, "A1", line_id=coke_line.id)

        assert result["order_id"] == second.id
        assert result["order_deleted"] is False
        db_session.expire_all()
        assert [l.name for l in db_session.get(Order, second.id).lines] == ["Fries"]
        assert db_session.get(Order, second.id).total_amount == 80

    def test_does_not_restock_by_default(self, db_session, tenant_a, menu, seat_a1):
        billing_service.remove_item(tenant_a, "A1", item_name="Fries")

        db_session.expire_all()
        assert db_session.get(Product, menu["fries"].id).stock == 19

    def test_restock_flag_returns_one_unit(self, db_session, tenant_a, menu, seat_a1):
        result = billing_service.remove_item(tenant_a, "A1", item_name="Fries", restock=True)

        assert result["restocked"] is True
        db_session.expire_all()
        assert db_session.get(Product, menu["fries"].id).stock == 20

    def test_item_not_on_bill(self, db_session, tenant_a, seat_a1):
        with pytest.raises(ItemNotFound):
            billing_service.remove_item(tenant_a, "A1", item_name="Pizza")

    def test_name_match_is_exact(self, db_session, tenant_a, seat_a1):
        with pytest.raises(ItemNotFound):
            billing_service.remove_item(tenant_a, "A1", item_name="coke")

    def test_paid_orders_are_not_edited(self, db_session, tenant_a, seat_a1):
        lifecycle_service.close_bill(tenant_a, "A1")

        with pytest.raises(ItemNotFound):
            billing_service.remove_item(tenant_a, "A1", item_name="Coke")

        assert db_session.query(Order).filter_by(status=PAID).count() == 2

    def test_requires_item_name_or_line_id(self, db_session, tenant_a, seat_a1):
        with pytest.raises(ValidationError):
            billing_service.remove_item(tenant_a, "A1")

    def test_removing_every_item_empties_the_bill(self, db_session, tenant_a, seat_a1):
        for name in ("Coke", "Coke", "Fries"):
            billing_service.remove_item(tenant_a, "A1", item_name=name)

        assert billing_service.get_bill(tenant_a, "A1") is None
        assert db_session.query(Order).count() == 0
        assert db_session.query(OrderLine).count() == 0


class TestAddItem:

    def test_adds_completed_single_line_order(self, db_session, tenant_a, menu, seat_a1):
        order = billing_service.add_item(tenant_a, "A1", menu["fries"].id)

        assert order.status == COMPLETED
        assert order.tax_amount == 0
        assert [(l.name, l.quantity, l.unit_price) for l in order.lines] == [("Fries", 1, 80)]

        bill = billing_service.get_bill(tenant_a, "A1")
        assert bill["orders_count"] == 3
        assert bill["grand_total"] == 240

        db_session.expire_all()
        assert db_session.get(Product, menu["fries"].id).stock == 18

    def test_out_of_stock_creates_nothing(self, db_session, tenant_a, owner_a, make_product):
        sold_out = make_product(owner_a, name="Brownie", price=120, stock=0, category="Dessert")

        with pytest.raises(OutOfStock) as exc:
            billing_service.add_item(tenant_a, "A1", sold_out.id)

        assert isinstance(exc.value, InsufficientStock)
        assert exc.value.code == "OutOfStock"
        assert db_session.query(Order).count() == 0
        db_session.expire_all()
        assert db_session.get(Product, sold_out.id).stock == 0
