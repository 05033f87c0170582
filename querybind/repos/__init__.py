from .store_memory import InMemoryStore
from .store_protocol import QueryableStore
from .store_sqlalchemy import SqlAlchemyStore

__all__ = ["InMemoryStore", "QueryableStore", "SqlAlchemyStore"]
