"""
Database wiring: engine creation and per-collection repositories.

The URL comes from DATABASE_URL, then from the RDS secret named by
DB_SECRET_ARN, then falls back to a local SQLite file so the code runs
without any AWS resources.
"""

from __future__ import annotations

import json
from typing import Dict, Optional

import boto3
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from repositories.collection_repo import CollectionRepository
from repositories.tables import COLLECTIONS, metadata
from utils.logging_config import get_logger
from utils.settings import AppSettings

logger = get_logger(__name__)

# Connection pooling for Lambda reuse.
_engine: Optional[Engine] = None


def get_db_engine(settings: Optional[AppSettings] = None) -> Engine:
    """Get or create the SQLAlchemy engine."""
    global _engine
    if _engine is None:
        settings = settings or AppSettings.from_environment()
        db_url = resolve_database_url(settings)
        if db_url.startswith("sqlite"):
            _engine = create_engine(db_url)
        else:
            _engine = create_engine(
                db_url,
                poolclass=QueuePool,
                pool_size=1,
                max_overflow=2,
                pool_pre_ping=True,
                pool_recycle=300,
            )
    return _engine


def resolve_database_url(settings: AppSettings) -> str:
    if settings.database_url:
        return settings.database_url
    if settings.db_secret_arn:
        url = _secret_to_db_url(settings.db_secret_arn)
        if url:
            return url
    logger.warning(
        "DATABASE_URL not set; using local SQLite database",
        extra={"url": settings.local_database_url},
    )
    return settings.local_database_url


def _secret_to_db_url(secret_arn: str) -> Optional[str]:
    """Build a SQLAlchemy URL from an RDS secret."""
    try:
        sm = boto3.client("secretsmanager")
        secret = json.loads(sm.get_secret_value(SecretId=secret_arn)["SecretString"])
        host = secret.get("host")
        port = secret.get("port", 5432)
        username = secret.get("username")
        password = secret.get("password")
        dbname = secret.get("dbname", "postgres")
        if not (host and username and password):
            return None
        return f"postgresql+psycopg2://{username}:{password}@{host}:{port}/{dbname}"
    except Exception as exc:
        logger.warning("Failed to load DB secret", extra={"error": str(exc)})
        return None


class Database:
    """One CollectionRepository per hosted collection."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._collections: Dict[str, CollectionRepository] = {
            name: CollectionRepository(engine, table) for name, table in COLLECTIONS.items()
        }
        self.customers = self._collections["customers"]
        self.transactions = self._collections["transactions"]
        self.customer_interactions = self._collections["customerInteractions"]
        self.customer_segments = self._collections["customerSegments"]
        self.customer_segment_assignments = self._collections["customerSegmentAssignments"]
        self.ai_insights = self._collections["aiInsights"]
        self.risk_assessments = self._collections["riskAssessments"]

    def collection(self, name: str) -> CollectionRepository:
        """Look up a repository by hosted collection name or table name."""
        if name in self._collections:
            return self._collections[name]
        for repo in self._collections.values():
            if repo.name == name:
                return repo
        raise KeyError(f"Unknown collection '{name}'")

    def create_schema(self) -> None:
        metadata.create_all(self.engine)


_database: Optional[Database] = None


def get_database() -> Database:
    """Process-wide Database, schema created on first use."""
    global _database
    if _database is None:
        _database = Database(get_db_engine())
        _database.create_schema()
    return _database
