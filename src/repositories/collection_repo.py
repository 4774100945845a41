"""Collection-style repository over a single SQLAlchemy Core table."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import Table, func, insert, select, update
from sqlalchemy.engine import Engine

from utils.error_handling import NotFoundError


class CollectionRepository:
    """list/get/create/create_many/update against one table.

    Rows go in and come out as plain dicts keyed by column name, which keeps
    the service layer independent of SQLAlchemy.
    """

    def __init__(self, engine: Engine, table: Table):
        self.engine = engine
        self.table = table

    @property
    def name(self) -> str:
        return self.table.name

    def list(
        self,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[Mapping[str, str]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return rows matching every filter in ``where``.

        A list, tuple or set value matches any of its members.
        """
        stmt = self._filtered(select(self.table), where)
        for column, direction in (order_by or {}).items():
            col = self._column(column)
            if str(direction).lower() == "desc":
                stmt = stmt.order_by(col.desc())
            elif str(direction).lower() == "asc":
                stmt = stmt.order_by(col.asc())
            else:
                raise ValueError(f"Unsupported sort direction '{direction}' for {column}")
        if limit is not None:
            stmt = stmt.limit(limit)

        with self.engine.connect() as conn:
            return [dict(row._mapping) for row in conn.execute(stmt)]

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        stmt = select(self.table).where(self.table.c.id == record_id)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).fetchone()
            return dict(row._mapping) if row else None

    def create(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        row = self._prepare(record)
        with self.engine.begin() as conn:
            conn.execute(insert(self.table), [row])
        return row

    def create_many(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Insert all records in one transaction; returns the row count."""
        rows = [self._prepare(record) for record in records]
        if not rows:
            return 0
        with self.engine.begin() as conn:
            conn.execute(insert(self.table), rows)
        return len(rows)

    def update(self, record_id: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        changes = {self._column(k).name: v for k, v in values.items()}
        changes["updated_at"] = _utcnow()
        stmt = update(self.table).where(self.table.c.id == record_id).values(**changes)
        with self.engine.begin() as conn:
            result = conn.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError(f"{self.name} record '{record_id}' not found")
        return self.get(record_id)

    def count(self, where: Optional[Mapping[str, Any]] = None) -> int:
        stmt = self._filtered(select(func.count()).select_from(self.table), where)
        with self.engine.connect() as conn:
            return int(conn.execute(stmt).scalar() or 0)

    def _filtered(self, stmt, where: Optional[Mapping[str, Any]]):
        for column, value in (where or {}).items():
            col = self._column(column)
            if isinstance(value, (list, tuple, set, frozenset)):
                stmt = stmt.where(col.in_(list(value)))
            else:
                stmt = stmt.where(col == value)
        return stmt

    def _prepare(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        row = {self._column(k).name: v for k, v in record.items()}
        if not row.get("id"):
            raise ValueError(f"{self.name} records require an id")
        now = _utcnow()
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        # Insert statements with heterogeneous keys break executemany.
        return {col.name: row.get(col.name) for col in self.table.columns}

    def _column(self, name: str):
        try:
            return self.table.c[name]
        except KeyError:
            raise ValueError(f"Unknown column '{name}' on {self.name}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
