from .dependencies import QueryBindDependency
from .handlers import register_query_bind_handlers

__all__ = ["QueryBindDependency", "register_query_bind_handlers"]
