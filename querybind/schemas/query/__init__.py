from .attributes import (
    AttributeDescriptor,
    AttributeInfo,
    EntitySchema,
    EntitySchemaRegistry,
    FilterOp,
    Filterable,
    TypeTag,
)
from .binding import get_binding_config, query_bind
from .builder import PredicateBuilder
from .coercion import coerce
from .discovery import discover, schema_registry
from .params import BindingConfig, ResolvedRequest, resolve
from .predicate import And, Between, Equals, In, IsNotNull, IsNull, Like, Or, Predicate, Range, RangeBound

__all__ = [
    "And",
    "AttributeDescriptor",
    "AttributeInfo",
    "Between",
    "BindingConfig",
    "EntitySchema",
    "EntitySchemaRegistry",
    "Equals",
    "FilterOp",
    "Filterable",
    "In",
    "IsNotNull",
    "IsNull",
    "Like",
    "Or",
    "Predicate",
    "PredicateBuilder",
    "Range",
    "RangeBound",
    "ResolvedRequest",
    "TypeTag",
    "coerce",
    "discover",
    "get_binding_config",
    "query_bind",
    "resolve",
    "schema_registry",
]
