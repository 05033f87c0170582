from datetime import date

from sqlalchemy import Date, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship

from querybind.schemas.query.attributes import FilterOp, Filterable

from .entities import Tier


class Base(DeclarativeBase):
    pass


class AddressModel(Base):
    __tablename__ = "addresses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    city: Mapped[str | None] = mapped_column(String(64), info={"filterable": Filterable(op=FilterOp.LIKE)})


class CustomerModel(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, info={"filterable": Filterable()})
    name: Mapped[str] = mapped_column(String(128), info={"filterable": Filterable(op=FilterOp.LIKE)})
    email: Mapped[str | None] = mapped_column(String(128))
    status: Mapped[str] = mapped_column(String(16), info={"filterable": Filterable(op=FilterOp.IN)})
    tier: Mapped[Tier | None] = mapped_column(Enum(Tier), info={"filterable": Filterable()})
    balance: Mapped[float | None] = mapped_column(
        Float, info={"filterable": Filterable(op=FilterOp.GREATER_THAN, param="min_balance")}
    )
    signup: Mapped[date | None] = mapped_column(Date, info={"filterable": Filterable(op=FilterOp.BETWEEN)})
    address_id: Mapped[int | None] = mapped_column(ForeignKey("addresses.id"))

    address: Mapped[AddressModel | None] = relationship()
    orders: Mapped[list["OrderModel"]] = relationship(back_populates="customer")


class OrderModel(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"))
    product: Mapped[str] = mapped_column(String(64))

    customer: Mapped[CustomerModel] = relationship(back_populates="orders")


def seed(session: Session) -> None:
    """Seven customers: four live in a city containing "bo", two have no address."""
    boston = AddressModel(id=1, city="Boston")
    bogota = AddressModel(id=2, city="Bogota")
    austin = AddressModel(id=3, city="Austin")
    session.add_all([boston, bogota, austin])

    customers = [
        CustomerModel(id=1, name="John Smith", status="active", tier=Tier.GOLD, balance=120.5, signup=date(2024, 1, 10), address=boston),
        CustomerModel(id=2, name="alice Jones", status="pending", tier=Tier.SILVER, balance=80.0, signup=date(2024, 2, 3), address=austin),
        CustomerModel(id=3, name="Joan Baker", status="active", tier=Tier.BRONZE, balance=15.0, signup=date(2024, 3, 15), address=boston),
        CustomerModel(id=4, name="Bob Stone", status="closed", signup=date(2023, 12, 1)),
        CustomerModel(id=5, name="Jorge Ruiz", status="pending", tier=Tier.GOLD, balance=310.0, signup=date(2024, 4, 20), address=bogota),
        CustomerModel(id=6, name="carol 100%", status="active", balance=42.1, signup=date(2024, 5, 5), address=boston),
        CustomerModel(id=7, name="Dan Brown", status="closed", tier=Tier.BRONZE, balance=9.99),
    ]
    session.add_all(customers)
    session.add_all(
        [
            OrderModel(id=1, customer_id=1, product="Laptop"),
            OrderModel(id=2, customer_id=1, product="Mouse"),
            OrderModel(id=3, customer_id=5, product="Laptop"),
            OrderModel(id=4, customer_id=6, product="Desk"),
        ]
    )
    session.commit()
