from sqlmodel import Session, select

from app.models.address import Address
from app.models.order import Order, OrderItem
from app.models.product import Product, ProductVariant
from app.models.user import User


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: int,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def list_all_with_customers(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[tuple[Order, User | None]]:
        stmt = (
            select(Order, User)
            .outerjoin(User, User.id == Order.user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, order_id: int) -> Order | None:
        return session.get(Order, order_id)

    def get_for_user(
        self,
        session: Session,
        user_id: int,
        order_id: int,
    ) -> Order | None:
        stmt = select(Order).where(Order.id == order_id, Order.user_id == user_id)
        return session.exec(stmt).first()

    def tracking_number_exists(self, session: Session, tracking_number: str) -> bool:
        stmt = select(Order.id).where(Order.tracking_number == tracking_number)
        return session.exec(stmt).first() is not None

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def get_address(self, session: Session, address_id: int) -> Address | None:
        return session.get(Address, address_id)

    # ---- Order items ----

    def create_item(self, session: Session, item: OrderItem) -> OrderItem:
        session.add(item)
        session.flush()
        return item

    def list_items_with_details(
        self,
        session: Session,
        order_id: int,
    ) -> list[tuple[OrderItem, ProductVariant | None, Product | None]]:
        """
        Line items joined with variant and product display fields.
        Outer joins keep items whose variant no longer resolves.
        """
        stmt = (
            select(OrderItem, ProductVariant, Product)
            .outerjoin(ProductVariant, ProductVariant.id == OrderItem.variant_id)
            .outerjoin(Product, Product.id == ProductVariant.product_id)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.id)
        )
        return list(session.exec(stmt).all())
