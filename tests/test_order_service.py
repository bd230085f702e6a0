"""Tests for transactional order placement."""

import re
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlmodel import Session, SQLModel, create_engine, select

from app.core.errors import ConflictError, OrderCreationFailed, ValidationError
from app.models.address import Address
from app.models.order import Order, OrderItem
from app.models.product import Product, ProductVariant
from app.models.user import User
from app.repositories.address_repo import AddressRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.order import LineItemOutcome, OrderCreate
from app.services.address_service import AddressService
from app.services.order_service import OrderService
from app.services.tracking import TrackingNumberGenerator


def build_service(enforce_non_negative_stock=False):
    order_repo = OrderRepository()
    return OrderService(
        order_repo,
        ProductRepository(),
        AddressService(AddressRepository()),
        TrackingNumberGenerator(order_repo),
        enforce_non_negative_stock=enforce_non_negative_stock,
    )


def order_payload(address, items, total, **extra):
    return OrderCreate.model_validate(
        {
            "items": items,
            "shipping_address": address,
            "billing_address": address,
            "total": total,
            **extra,
        }
    )


def count(session, model):
    return len(session.exec(select(model)).all())


class TestCreateOrder:
    def test_single_item_order(self, session, customer, variant, address_payload):
        service = build_service()
        payload = order_payload(
            address_payload,
            [{"variant_id": variant.id, "quantity": 2, "unit_price": 10.0}],
            20.0,
        )

        order = service.create_order(session, customer.id, payload)

        assert order.status == "pending"
        assert order.user_id == customer.id
        assert order.total_amount == 20.0
        assert re.fullmatch(r"TRK\d{6,10}", order.tracking_number)
        assert len(order.items) == 1
        item = order.items[0]
        assert item.variant_id == variant.id
        assert item.quantity == 2
        assert item.unit_price == 10.0
        assert item.line_total == 20.0
        assert item.outcome == LineItemOutcome.INSERTED
        assert item.sku == "MUG-RED-L"
        assert item.product_name == "Ceramic Mug"
        assert order.subtotal == 20.0

        assert session.get(ProductVariant, variant.id).stock_quantity == 8
        # Identical shipping and billing addresses collapse into one row
        assert count(session, Address) == 1
        assert order.shipping_address.street == "1 Main St"
        assert order.billing_address.postal_code == "62701"

    def test_stock_decreases_by_exact_quantity_across_lines(
        self, session, customer, variant, address_payload
    ):
        service = build_service()
        payload = order_payload(
            address_payload,
            [
                {"variant_id": variant.id, "quantity": 3, "unit_price": 10.0},
                {"variant_id": variant.id, "quantity": 4, "unit_price": 10.0},
            ],
            70.0,
        )

        service.create_order(session, customer.id, payload)

        assert session.get(ProductVariant, variant.id).stock_quantity == 3
        assert count(session, OrderItem) == 2

    def test_legacy_item_keys(self, session, customer, variant, address_payload):
        service = build_service()
        payload = order_payload(
            address_payload,
            [{"product_id": variant.id, "quantity": 1, "price": 12.5}],
            17.5,
            shipping=5.0,
        )

        order = service.create_order(session, customer.id, payload)

        assert order.items[0].variant_id == variant.id
        assert order.items[0].unit_price == 12.5

    def test_unit_price_is_a_snapshot(self, session, customer, variant, address_payload):
        service = build_service()
        payload = order_payload(
            address_payload,
            [{"variant_id": variant.id, "quantity": 1, "unit_price": 7.25}],
            7.25,
        )
        order = service.create_order(session, customer.id, payload)

        variant.price_modifier = 100.0
        session.add(variant)
        session.commit()

        reread = service.get_user_order(session, customer.id, order.id)
        assert reread.items[0].unit_price == 7.25

    def test_unknown_variant_is_recorded_without_stock_update(
        self, session, customer, variant, address_payload
    ):
        service = build_service()
        payload = order_payload(
            address_payload,
            [
                {"variant_id": 9999, "quantity": 1, "unit_price": 5.0},
                {"variant_id": variant.id, "quantity": 1, "unit_price": 10.0},
            ],
            15.0,
        )

        order = service.create_order(session, customer.id, payload)

        outcomes = [item.outcome for item in order.items]
        assert outcomes == [
            LineItemOutcome.INSERTED_NO_STOCK_UPDATE,
            LineItemOutcome.INSERTED,
        ]
        assert order.items[0].sku is None
        assert session.get(ProductVariant, variant.id).stock_quantity == 9

    def test_oversell_allowed_by_default(self, session, customer, variant, address_payload):
        service = build_service()
        payload = order_payload(
            address_payload,
            [{"variant_id": variant.id, "quantity": 12, "unit_price": 1.0}],
            12.0,
        )

        service.create_order(session, customer.id, payload)

        assert session.get(ProductVariant, variant.id).stock_quantity == -2

    def test_stock_floor_rejects_and_rolls_back(
        self, session, customer, variant, address_payload
    ):
        service = build_service(enforce_non_negative_stock=True)
        payload = order_payload(
            address_payload,
            [{"variant_id": variant.id, "quantity": 11, "unit_price": 1.0}],
            11.0,
        )

        with pytest.raises(ConflictError):
            service.create_order(session, customer.id, payload)

        assert count(session, Order) == 0
        assert count(session, OrderItem) == 0
        assert count(session, Address) == 0
        assert session.get(ProductVariant, variant.id).stock_quantity == 10


class TestCreateOrderValidation:
    def test_empty_items_writes_nothing(self, session, customer, variant, address_payload):
        service = build_service()
        payload = order_payload(address_payload, [], 0.0)

        with pytest.raises(ValidationError):
            service.create_order(session, customer.id, payload)

        assert count(session, Order) == 0
        assert count(session, Address) == 0
        assert session.get(ProductVariant, variant.id).stock_quantity == 10

    def test_missing_billing_address(self, session, customer, variant, address_payload):
        service = build_service()
        payload = OrderCreate.model_validate(
            {
                "items": [{"variant_id": variant.id, "quantity": 1, "unit_price": 10.0}],
                "shipping_address": address_payload,
                "total": 10.0,
            }
        )

        with pytest.raises(ValidationError, match="addresses are required"):
            service.create_order(session, customer.id, payload)

        assert count(session, Address) == 0

    def test_discounted_total_is_stored_as_sent(
        self, session, customer, variant, address_payload, caplog
    ):
        service = build_service()
        payload = order_payload(
            address_payload,
            [{"variant_id": variant.id, "quantity": 2, "unit_price": 10.0}],
            18.0,
        )

        with caplog.at_level("WARNING", logger="app.services.order_service"):
            order = service.create_order(session, customer.id, payload)

        assert order.total_amount == 18.0
        assert order.subtotal == 20.0
        assert session.get(Order, order.id).total_amount == 18.0
        assert "differs from items" in caplog.text

    def test_total_includes_shipping_and_tax(
        self, session, customer, variant, address_payload
    ):
        service = build_service()
        payload = order_payload(
            address_payload,
            [{"variant_id": variant.id, "quantity": 1, "unit_price": 10.0}],
            13.5,
            shipping=2.5,
            tax=1.0,
        )

        order = service.create_order(session, customer.id, payload)

        assert order.total_amount == 13.5
        assert order.subtotal == 10.0


class TestCreateOrderRollback:
    def test_stock_failure_rolls_back_everything(
        self, session, customer, variant, address_payload, monkeypatch
    ):
        service = build_service()

        def broken_decrement(session, variant_id, quantity):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(service.product_repo, "decrement_stock", broken_decrement)
        payload = order_payload(
            address_payload,
            [{"variant_id": variant.id, "quantity": 2, "unit_price": 10.0}],
            20.0,
        )

        with pytest.raises(OrderCreationFailed) as exc_info:
            service.create_order(session, customer.id, payload)

        assert isinstance(exc_info.value.cause, RuntimeError)
        assert exc_info.value.message == "Failed to create order"
        assert count(session, Order) == 0
        assert count(session, OrderItem) == 0
        assert count(session, Address) == 0
        assert session.get(ProductVariant, variant.id).stock_quantity == 10

    def test_tracking_exhaustion_rolls_back(
        self, session, customer, variant, address_payload, monkeypatch
    ):
        service = build_service()
        monkeypatch.setattr(
            service.tracking.order_repo,
            "tracking_number_exists",
            lambda session, candidate: True,
        )
        payload = order_payload(
            address_payload,
            [{"variant_id": variant.id, "quantity": 1, "unit_price": 10.0}],
            10.0,
        )

        with pytest.raises(ConflictError, match="tracking number"):
            service.create_order(session, customer.id, payload)

        assert count(session, Address) == 0
        assert count(session, Order) == 0


class TestAddressDedup:
    def test_reuses_existing_address(self, session, customer, variant, address_payload):
        service = build_service()
        item = {"variant_id": variant.id, "quantity": 1, "unit_price": 10.0}

        first = service.create_order(
            session, customer.id, order_payload(address_payload, [item], 10.0)
        )
        second = service.create_order(
            session, customer.id, order_payload(address_payload, [item], 10.0)
        )

        assert count(session, Address) == 1
        first_order = session.get(Order, first.id)
        second_order = session.get(Order, second.id)
        assert first_order.shipping_address_id == second_order.shipping_address_id
        assert first.tracking_number != second.tracking_number

    def test_different_postal_code_creates_new_address(
        self, session, customer, variant, address_payload
    ):
        service = build_service()
        item = {"variant_id": variant.id, "quantity": 1, "unit_price": 10.0}
        billing = {**address_payload, "postal_code": "62702"}

        order = service.create_order(
            session,
            customer.id,
            OrderCreate.model_validate(
                {
                    "items": [item],
                    "shipping_address": address_payload,
                    "billing_address": billing,
                    "total": 10.0,
                }
            ),
        )

        stored = session.get(Order, order.id)
        assert stored.shipping_address_id != stored.billing_address_id
        shipping = session.get(Address, stored.shipping_address_id)
        billing_row = session.get(Address, stored.billing_address_id)
        assert shipping.is_shipping and not shipping.is_billing
        assert billing_row.is_billing and not billing_row.is_shipping

    def test_whitespace_is_significant(self, session, customer, variant, address_payload):
        service = build_service()
        item = {"variant_id": variant.id, "quantity": 1, "unit_price": 10.0}
        padded = {**address_payload, "street": "1 Main St "}

        service.create_order(
            session, customer.id, order_payload(address_payload, [item], 10.0)
        )
        service.create_order(session, customer.id, order_payload(padded, [item], 10.0))

        assert count(session, Address) == 2


@pytest.fixture
def file_engine(tmp_path):
    """SQLite database on disk, so each thread gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'shop.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


class TestConcurrentPlacement:
    ORDERS = 40
    WORKERS = 8

    def seed(self, engine):
        with Session(engine) as session:
            user = User(email="grace@example.com", external_id="idp-grace")
            product = Product(name="Tea Pot", slug="tea-pot", base_price=30.0)
            session.add_all([user, product])
            session.commit()
            variant = ProductVariant(product_id=product.id, sku="POT-1", stock_quantity=100)
            session.add(variant)
            session.commit()
            return user.id, variant.id

    def test_parallel_orders_get_distinct_tracking_numbers(
        self, file_engine, address_payload
    ):
        user_id, variant_id = self.seed(file_engine)
        service = build_service()
        payload = order_payload(
            address_payload,
            [{"variant_id": variant_id, "quantity": 1, "unit_price": 30.0}],
            30.0,
        )

        def place(_):
            with Session(file_engine) as session:
                try:
                    return service.create_order(session, user_id, payload).tracking_number
                except (ConflictError, OrderCreationFailed):
                    return None

        with ThreadPoolExecutor(max_workers=self.WORKERS) as pool:
            results = list(pool.map(place, range(self.ORDERS)))

        placed = [number for number in results if number is not None]
        assert placed
        assert len(set(placed)) == len(placed)

        with Session(file_engine) as session:
            assert count(session, Order) == len(placed)
            assert count(session, OrderItem) == len(placed)
            stored = set(session.exec(select(Order.tracking_number)).all())
            assert stored == set(placed)
            assert session.get(ProductVariant, variant_id).stock_quantity == 100 - len(placed)
