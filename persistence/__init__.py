from persistence.adapters.outbound.store_memory import InMemoryStore
from persistence.adapters.outbound.store_sqlalchemy import SqlAlchemyStore
from persistence.services.field_accessor import BoolField, resolve_bool_field
from persistence.services.store_operations import StoreOperations
from shared.abstracts.abstract_store import AbstractStore
from shared.entities.page import Page
from shared.exceptions import (
    ConfigurationError,
    InvalidFieldDescriptor,
    InvalidPageRequest,
    OperationCancelled,
    PersistenceError,
)

__all__ = [
    "AbstractStore",
    "BoolField",
    "ConfigurationError",
    "InMemoryStore",
    "InvalidFieldDescriptor",
    "InvalidPageRequest",
    "OperationCancelled",
    "Page",
    "PersistenceError",
    "SqlAlchemyStore",
    "StoreOperations",
    "resolve_bool_field",
]
