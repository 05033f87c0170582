import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel

from querybind.schemas.query.attributes import FilterOp, Filterable


class Tier(str, enum.Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


class Address(BaseModel):
    city: Annotated[str | None, Filterable(op=FilterOp.LIKE)] = None
    country: str | None = None


class Customer(BaseModel):
    id: Annotated[int, Filterable()]
    name: Annotated[str, Filterable(op=FilterOp.LIKE)]
    email: str | None = None
    status: Annotated[str, Filterable(op=FilterOp.IN)] = "active"
    tier: Annotated[Tier | None, Filterable()] = None
    balance: Annotated[Decimal | None, Filterable(op=FilterOp.GREATER_THAN, param="min_balance")] = None
    signup: Annotated[date | None, Filterable(op=FilterOp.BETWEEN)] = None
    deleted_at: Annotated[datetime | None, Filterable()] = None
    verified: Annotated[bool, Filterable()] = False
    address: Address | None = None


class VipCustomer(Customer):
    manager: Annotated[str | None, Filterable()] = None


def sample_customers() -> list[Customer]:
    """
    Twelve customers. Seven names contain "jo" (John, Jones, Joan, Jorge, Jody,
    Marjorie, Bjorn), all of them with status active or pending.
    """
    rows = [
        (1, "John Smith", "john@example.com", "active", Tier.GOLD, "120.50", date(2024, 1, 10), None, True, "Boston"),
        (2, "Alice Jones", "alice@example.com", "pending", Tier.SILVER, "80.00", date(2024, 2, 3), None, False, "Austin"),
        (3, "Joan Baker", "joan@example.com", "active", Tier.BRONZE, "15.00", date(2024, 3, 15), None, True, "Denver"),
        (4, "Bob Stone", "bob@example.com", "closed", None, None, date(2023, 12, 1), datetime(2024, 5, 1, 9, 30), False, None),
        (5, "Jorge Ruiz", "jorge@example.com", "pending", Tier.GOLD, "310.00", date(2024, 4, 20), None, True, "Bogota"),
        (6, "Carol White", "carol@example.com", "active", Tier.SILVER, "42.10", date(2024, 5, 5), None, True, "Boston"),
        (7, "Jody Fox", "jody@example.com", "active", None, "0.00", date(2024, 6, 30), None, False, "Austin"),
        (8, "Dan Brown", None, "closed", Tier.BRONZE, "9.99", date(2022, 7, 7), datetime(2023, 1, 2, 0, 0), False, "Denver"),
        (9, "Marjorie Lane", "marjorie@example.com", "active", Tier.GOLD, "999.00", date(2024, 8, 8), None, True, None),
        (10, "Eve Adams", "eve@example.com", "pending", None, None, None, None, False, "Boston"),
        (11, "Bjorn Berg", "bjorn@example.com", "active", Tier.SILVER, "55.55", date(2024, 9, 9), None, True, "Oslo"),
        (12, "Frank Moore", "frank@example.com", "active", Tier.BRONZE, "1.00", date(2024, 10, 10), None, False, "Austin"),
    ]
    return [
        Customer(
            id=id_,
            name=name,
            email=email,
            status=status,
            tier=tier,
            balance=Decimal(balance) if balance is not None else None,
            signup=signup,
            deleted_at=deleted_at,
            verified=verified,
            address=Address(city=city) if city is not None else None,
        )
        for id_, name, email, status, tier, balance, signup, deleted_at, verified, city in rows
    ]
