from .pagination import OrderDirection, ResultPage

__all__ = ["OrderDirection", "ResultPage"]
