import logging
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.errors import (
    AppError,
    ConflictError,
    NotFoundError,
    OrderCreationFailed,
    ValidationError,
)
from app.models.address import Address
from app.models.order import Order, OrderItem
from app.models.product import Product, ProductVariant
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.order import (
    AdminOrderRead,
    LineItemOutcome,
    OrderAddressRead,
    OrderCreate,
    OrderCustomerRead,
    OrderItemCreate,
    OrderItemRead,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from app.services import order_status
from app.services.address_service import AddressService
from app.services.tracking import TrackingNumberGenerator

logger = logging.getLogger(__name__)

# Gap between the declared total and items + shipping + tax that is logged
TOTAL_TOLERANCE = 0.01


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Place an order in one transaction: addresses, tracking number,
        order header, line items and stock decrements
      - Customer order history and self-service cancellation
      - Admin listing and status changes
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        address_service: AddressService,
        tracking: TrackingNumberGenerator,
        enforce_non_negative_stock: bool = False,
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.address_service = address_service
        self.tracking = tracking
        self.enforce_non_negative_stock = enforce_non_negative_stock

    # -------- Order placement --------

    def create_order(
        self,
        session: Session,
        user_id: int,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Place an order for `user_id`.

        Steps (all on `session`, committed once):
          1. Dedup/create the shipping address.
          2. Dedup/create the billing address.
          3. Allocate a tracking number.
          4. Insert the Order row (status='pending').
          5. Insert each OrderItem and decrement its variant's stock.
          6. Commit, or roll back everything on any error.
          7. Re-read and return the full order.

        Raises:
            ValidationError: empty items or missing addresses
                (raised before any write).
            ConflictError: tracking numbers exhausted, or stock too low
                with the non-negative floor enabled.
            OrderCreationFailed: any other failure inside the transaction.
        """
        self._validate_order_request(payload)

        try:
            shipping_address_id = self.address_service.find_or_create(
                session, user_id, payload.shipping_address, "shipping"
            )
            billing_address_id = self.address_service.find_or_create(
                session, user_id, payload.billing_address, "billing"
            )
            tracking_number = self.tracking.generate(session)

            order = self.order_repo.create_order(
                session,
                Order(
                    user_id=user_id,
                    total_amount=payload.total,
                    status=order_status.PENDING,
                    shipping_address_id=shipping_address_id,
                    billing_address_id=billing_address_id,
                    tracking_number=tracking_number,
                ),
            )
            order_id = order.id

            outcomes = [
                self._add_line_item(session, order_id, item) for item in payload.items
            ]

            session.commit()
        except AppError as exc:
            session.rollback()
            logger.warning(f"Order for user {user_id} rolled back: {exc.message}")
            raise
        except Exception as exc:
            session.rollback()
            logger.error(f"Order for user {user_id} rolled back: {exc!r}")
            raise OrderCreationFailed(exc) from exc

        logger.info(f"Order {order_id} ({tracking_number}) created for user {user_id}")

        created = self.order_repo.get_by_id(session, order_id)
        return self._build_order_with_items_dto(session, created, outcomes)

    def _validate_order_request(self, payload: OrderCreate) -> None:
        """Cheap checks, done before the transaction starts."""
        if not payload.items:
            raise ValidationError("Order must contain at least one item")

        if payload.shipping_address is None or payload.billing_address is None:
            raise ValidationError("Shipping and billing addresses are required")

        # Total is stored as sent (discounts are priced client-side)
        subtotal = sum(item.quantity * item.unit_price for item in payload.items)
        expected = subtotal + payload.shipping + payload.tax
        if abs(expected - payload.total) > TOTAL_TOLERANCE:
            logger.warning(
                f"Order total {payload.total:.2f} differs from items, "
                f"shipping and tax ({expected:.2f})"
            )

    def _add_line_item(
        self,
        session: Session,
        order_id: int,
        item: OrderItemCreate,
    ) -> LineItemOutcome:
        """
        Insert one line item and decrement stock for its variant.

        An unknown variant does not abort the order: the item is still
        recorded and the stock step is skipped.
        """
        self.order_repo.create_item(
            session,
            OrderItem(
                order_id=order_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
            ),
        )

        variant = self.product_repo.lock_variant(session, item.variant_id)
        if variant is None:
            logger.warning(f"Variant not found for stock update: {item.variant_id}")
            return LineItemOutcome.INSERTED_NO_STOCK_UPDATE

        if self.enforce_non_negative_stock and variant.stock_quantity < item.quantity:
            raise ConflictError(
                f"Insufficient stock for variant {variant.id} "
                f"(have {variant.stock_quantity}, requested {item.quantity})"
            )

        self.product_repo.decrement_stock(session, variant.id, item.quantity)
        return LineItemOutcome.INSERTED

    # -------- Customer operations --------

    def list_user_orders(
        self,
        session: Session,
        user_id: int,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderWithItemsRead]:
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        return [self._build_order_with_items_dto(session, order) for order in orders]

    def get_user_order(
        self,
        session: Session,
        user_id: int,
        order_id: int,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_for_user(session, user_id, order_id)
        if not order:
            raise NotFoundError("Order not found or access denied")
        return self._build_order_with_items_dto(session, order)

    def cancel_user_order(
        self,
        session: Session,
        user_id: int,
        order_id: int,
    ) -> OrderWithItemsRead:
        """
        Self-service cancellation, allowed from pending/processing only.
        Stock is not restored.
        """
        order = self.order_repo.get_for_user(session, user_id, order_id)
        if not order:
            raise NotFoundError("Order not found or access denied")

        order_status.check_customer_cancel(order.status)
        return self._set_status(session, order, order_status.CANCELLED)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[AdminOrderRead]:
        rows = self.order_repo.list_all_with_customers(session, skip, limit)
        return [self._build_admin_order_dto(session, order, user) for order, user in rows]

    def get_order_admin(self, session: Session, order_id: int) -> AdminOrderRead:
        order = self._get_order_or_404(session, order_id)
        user = session.get(User, order.user_id)
        return self._build_admin_order_dto(session, order, user)

    def update_status(
        self,
        session: Session,
        order_id: int,
        payload: OrderStatusUpdate,
    ) -> OrderWithItemsRead:
        """
        Admin status change. Any known status is accepted regardless of
        the current one; off-lifecycle moves are only logged.
        """
        target = order_status.validate_status(payload.status)
        order = self._get_order_or_404(session, order_id)

        order_status.check_admin_transition(order.status, target)
        if order.status != target and not order_status.is_lifecycle_transition(
            order.status, target
        ):
            logger.warning(
                f"Admin moved order {order.id} outside the lifecycle: "
                f"{order.status} -> {target}"
            )
        return self._set_status(session, order, target)

    def cancel_order_admin(self, session: Session, order_id: int) -> OrderWithItemsRead:
        order = self._get_order_or_404(session, order_id)
        order_status.check_admin_transition(order.status, order_status.CANCELLED)
        return self._set_status(session, order, order_status.CANCELLED)

    # -------- Helpers --------

    def _get_order_or_404(self, session: Session, order_id: int) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _set_status(self, session: Session, order: Order, status: str) -> OrderWithItemsRead:
        order.status = status
        order.updated_at = datetime.now(timezone.utc)
        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)
        return self._build_order_with_items_dto(session, order)

    def _address_dto(self, session: Session, address_id: int) -> OrderAddressRead | None:
        address: Address | None = self.order_repo.get_address(session, address_id)
        if address is None:
            return None
        return OrderAddressRead(
            street=address.street,
            city=address.city,
            state=address.state,
            country=address.country,
            postal_code=address.postal_code,
        )

    def _item_dto(
        self,
        item: OrderItem,
        variant: ProductVariant | None,
        product: Product | None,
        outcome: LineItemOutcome | None,
    ) -> OrderItemRead:
        return OrderItemRead(
            id=item.id,
            order_id=item.order_id,
            variant_id=item.variant_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            line_total=round(item.quantity * item.unit_price, 2),
            product_name=product.name if product else None,
            sku=variant.sku if variant else None,
            color=variant.color if variant else None,
            size=variant.size if variant else None,
            material=variant.material if variant else None,
            outcome=outcome,
        )

    def _build_order_with_items_dto(
        self,
        session: Session,
        order: Order,
        outcomes: list[LineItemOutcome] | None = None,
    ) -> OrderWithItemsRead:
        """
        Compose OrderWithItemsRead: header, both addresses, and items
        joined with variant/product fields. `outcomes` (placement only)
        follows the insertion order of the items.
        """
        rows = self.order_repo.list_items_with_details(session, order.id)

        items: list[OrderItemRead] = []
        for index, (item, variant, product) in enumerate(rows):
            outcome = outcomes[index] if outcomes else None
            items.append(self._item_dto(item, variant, product, outcome))

        subtotal = round(sum(it.line_total for it in items), 2)

        return OrderWithItemsRead(
            id=order.id,
            user_id=order.user_id,
            total_amount=order.total_amount,
            status=order.status,
            tracking_number=order.tracking_number,
            shipping_address=self._address_dto(session, order.shipping_address_id),
            billing_address=self._address_dto(session, order.billing_address_id),
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=items,
            subtotal=subtotal,
        )

    def _build_admin_order_dto(
        self,
        session: Session,
        order: Order,
        user: User | None,
    ) -> AdminOrderRead:
        base = self._build_order_with_items_dto(session, order)
        customer = OrderCustomerRead(
            email=user.email if user else None,
            first_name=user.first_name if user else None,
            last_name=user.last_name if user else None,
            phone=user.phone if user else None,
        )
        return AdminOrderRead(**base.model_dump(), customer=customer)
