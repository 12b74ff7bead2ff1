from lending.repositories.memory import InMemoryBookingStore, InMemoryItemDirectory, InMemoryUserDirectory
from lending.repositories.sql import SqlBookingStore, SqlItemDirectory, SqlUserDirectory

__all__ = [
    "SqlBookingStore",
    "SqlItemDirectory",
    "SqlUserDirectory",
    "InMemoryBookingStore",
    "InMemoryItemDirectory",
    "InMemoryUserDirectory",
]
