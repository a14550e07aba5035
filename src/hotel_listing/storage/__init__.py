"""Storage backends."""

from .gateway import BulkDataStoreGateway, DataStoreGateway, PreloadedGateway
from .json_writer import JsonStore
from .sqlite_store import SqliteStore

__all__ = ["BulkDataStoreGateway", "DataStoreGateway", "JsonStore", "PreloadedGateway", "SqliteStore"]
