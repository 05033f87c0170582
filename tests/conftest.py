from collections.abc import Generator

from pytest import MonkeyPatch, fixture

mp = MonkeyPatch()
mp.setenv("PRODUCTION", "True")
mp.setenv("TESTING", "True")
mp.setenv("DEFAULT_PAGE_SIZE", "20")
mp.setenv("MAX_PAGE_SIZE", "100")

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from querybind.core.config import get_app_settings
from querybind.repos import InMemoryStore, SqlAlchemyStore
from querybind.schemas.query.attributes import EntitySchemaRegistry
from querybind.schemas.query.discovery import default_registry
from querybind.services.query_bind_service import QueryBindService

from .utils import entities, models


@fixture(scope="session", autouse=True)
def settings():
    settings = get_app_settings()
    assert settings.TESTING

    yield settings

    mp.undo()


@fixture
def registry() -> EntitySchemaRegistry:
    return default_registry()


@fixture
def service(registry: EntitySchemaRegistry) -> QueryBindService:
    return QueryBindService(registry)


@fixture
def customers() -> list[entities.Customer]:
    return entities.sample_customers()


@fixture
def memory_store(customers: list[entities.Customer]) -> InMemoryStore:
    return InMemoryStore({entities.Customer: customers})


def memory_engine() -> Engine:
    # one shared connection, so the database survives across the TestClient's threads
    return create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@fixture
def session() -> Generator[Session, None, None]:
    engine = memory_engine()
    models.Base.metadata.create_all(engine)

    with Session(engine) as session:
        models.seed(session)
        yield session

    engine.dispose()


@fixture
def empty_session() -> Generator[Session, None, None]:
    """A session on a database without any tables."""
    engine = memory_engine()

    with Session(engine) as session:
        yield session

    engine.dispose()


@fixture
def sql_store(session: Session) -> SqlAlchemyStore:
    return SqlAlchemyStore(session)
