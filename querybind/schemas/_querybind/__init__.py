from .querybind_model import _QueryBindModel

__all__ = ["_QueryBindModel"]
