from .jsonfile import JsonFileDocumentStore
from .memory import InMemoryDocumentStore

__all__ = ["InMemoryDocumentStore", "JsonFileDocumentStore"]
