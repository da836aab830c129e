# healthconnect/db/__init__.py
from typing import Optional

from fastapi import Request
from pymongo import MongoClient

from healthconnect import settings


class MongoStore:
    """
    Explicit handle around one Mongo database.

    Built once by the app lifespan (or by tests with a mongomock client),
    opened, attached to ``app.state.store`` and closed on shutdown.
    """

    def __init__(self, uri: Optional[str] = None, db_name: Optional[str] = None, client=None):
        self.uri = uri or settings.MONGO_URI
        self.db_name = db_name or settings.MONGO_DB
        self._client = client
        self._owns_client = client is None
        self.db = None

    def open(self) -> "MongoStore":
        if self._client is None:
            self._client = MongoClient(self.uri)
        self.db = self._client[self.db_name]
        return self

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None
        self.db = None

    def _col(self, name: str):
        if self.db is None:
            raise RuntimeError("MongoStore is not open")
        return self.db[name]

    # --- Collections (one source of truth) ---
    @property
    def users(self):
        return self._col("users")

    @property
    def daily_metrics(self):
        return self._col("daily_metrics")

    @property
    def assignments(self):
        return self._col("assignments")

    @property
    def activity_logs(self):
        return self._col("activity_logs")

    @property
    def audit_events(self):
        return self._col("audit_events")

    @property
    def revoked_tokens(self):
        return self._col("revoked_tokens")


def get_store(request: Request) -> MongoStore:
    """FastAPI dependency: the store opened by the app lifespan."""
    return request.app.state.store
