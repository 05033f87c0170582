from collections.abc import Generator

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from querybind.repos import SqlAlchemyStore
from querybind.routes import QueryBindDependency, register_query_bind_handlers
from querybind.schemas.query.binding import query_bind
from querybind.schemas.query.params import BindingConfig
from querybind.schemas.response.pagination import ResultPage
from tests.utils.models import CustomerModel


@query_bind(CustomerModel, search_attributes=("name", "address.city"), default_page_size=3, default_sort="name")
class CustomerListPage:
    pass


class Unmapped:
    pass


def create_app(session: Session, endpoint=CustomerListPage) -> FastAPI:
    app = FastAPI()
    register_query_bind_handlers(app)

    def get_store() -> SqlAlchemyStore:
        return SqlAlchemyStore(session)

    customers = QueryBindDependency(endpoint, get_store).as_dependency()

    @app.get("/customers")
    def list_customers(request: Request, page: ResultPage | None = Depends(customers)) -> dict:
        return {
            "names": [customer.name for customer in page.content],
            "page": page.model_dump(mode="json", by_alias=True, exclude={"content"}),
            "next": page.next_url(str(request.url)),
            "previous": page.previous_url(str(request.url)),
        }

    @app.post("/customers")
    def create_customer(page: ResultPage | None = Depends(customers)) -> dict:
        return {"bound": page is not None}

    return app


@pytest.fixture
def client(session: Session) -> Generator[TestClient, None, None]:
    with TestClient(create_app(session)) as client:
        yield client


def test_get_populates_result_page(client: TestClient):
    response = client.get("/customers", params={"search": "BO", "size": "2"})

    assert response.status_code == 200
    body = response.json()
    assert body["names"] == ["Bob Stone", "carol 100%"]
    assert body["page"]["totalElements"] == 5
    assert body["page"]["totalPages"] == 3
    assert body["page"]["activeFilters"] == {"search": "BO"}
    assert body["page"]["sortField"] == "name"
    assert body["next"] == "http://testserver/customers?search=BO&size=2&page=1"
    assert body["previous"] is None


def test_filters_from_query_string(client: TestClient):
    response = client.get("/customers?tier=gold&min_balance=200&min_balance=1")

    assert response.status_code == 200
    assert response.json()["names"] == ["Jorge Ruiz"]


def test_bad_filter_value_does_not_fail_the_request(client: TestClient):
    response = client.get("/customers", params={"id": "one", "sort": "nope", "page": "-4"})

    assert response.status_code == 200
    body = response.json()
    assert body["page"]["totalElements"] == 7
    assert body["page"]["page"] == 0
    assert body["page"]["activeFilters"] == {"id": "one"}


def test_only_get_requests_are_bound(client: TestClient):
    response = client.post("/customers")

    assert response.status_code == 200
    assert response.json() == {"bound": False}


def test_store_failure_is_503(empty_session: Session):
    with TestClient(create_app(empty_session)) as client:
        response = client.get("/customers")

    assert response.status_code == 503
    assert response.json() == {"detail": {"message": "The query could not be executed against the data store"}}


def test_configuration_error_is_500(session: Session):
    app = create_app(session, endpoint=BindingConfig(entity_type=Unmapped))

    with TestClient(app) as client:
        response = client.get("/customers")

    assert response.status_code == 500
    assert response.json() == {"detail": {"message": "The endpoint's query binding is not configured correctly"}}
