"""Repository for UserHealth event history."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection, Engine

from services.api.src.dorkfi.db.models import user_health_events
from services.api.src.dorkfi.domain.models import UserHealthEvent
from services.api.src.dorkfi.utils.timestamps import truncate_to_hour


def event_id(network_id: str, event: UserHealthEvent) -> str:
    """Primary key of a stored event; falls back to the round when tx id is unknown."""
    return f"{network_id}:{event.tx_id or event.round}:{event.user_id}"


class UserHealthRepository:
    """Repository for UserHealth event database operations."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._is_sqlite = "sqlite" in str(engine.url)

    def insert_events(self, network_id: str, events: Sequence[UserHealthEvent]) -> int:
        """
        Insert decoded events atomically.

        Uses INSERT ... ON CONFLICT DO NOTHING so re-fetched windows are harmless.

        Returns:
            Number of rows inserted (may be less than len(events) if duplicates exist)
        """
        if not events:
            return 0

        rows = {}
        now = datetime.now(timezone.utc)
        for e in events:
            key = event_id(network_id, e)
            if key in rows:
                continue
            rows[key] = {
                "id": key,
                "network_id": network_id,
                "round": e.round,
                "timestamp": e.timestamp,
                "timestamp_hour": truncate_to_hour(e.timestamp),
                "tx_id": e.tx_id,
                "user_id": e.user_id,
                "total_collateral_value": e.total_collateral_value,
                "total_borrow_value": e.total_borrow_value,
                "reported_health_factor": e.reported_health_factor,
                "created_at": now,
            }

        with self.engine.begin() as conn:
            if self._is_sqlite:
                return self._insert_sqlite(conn, list(rows.values()))
            else:
                return self._insert_postgres(conn, list(rows.values()))

    def _insert_postgres(self, conn: Connection, rows: list[dict]) -> int:
        stmt = pg_insert(user_health_events).values(rows)
        stmt = stmt.on_conflict_do_nothing(index_elements=["id"])
        result = conn.execute(stmt)
        return result.rowcount

    def _insert_sqlite(self, conn: Connection, rows: list[dict]) -> int:
        stmt = sqlite_insert(user_health_events).values(rows)
        stmt = stmt.on_conflict_do_nothing(index_elements=["id"])
        result = conn.execute(stmt)
        return result.rowcount

    def get_max_round(self, network_id: str) -> int | None:
        """Latest stored round for a network, or None if nothing is stored."""
        stmt = select(func.max(user_health_events.c.round)).where(
            user_health_events.c.network_id == network_id
        )

        with self.engine.connect() as conn:
            row = conn.execute(stmt).fetchone()
            if row is None or row[0] is None:
                return None
            return int(row[0])

    def get_events(self, network_id: str, min_round: int = 0) -> list[UserHealthEvent]:
        """Stored events from min_round onwards, oldest first."""
        stmt = (
            select(user_health_events)
            .where(user_health_events.c.network_id == network_id)
            .where(user_health_events.c.round >= min_round)
            .order_by(
                user_health_events.c.timestamp,
                user_health_events.c.round,
                user_health_events.c.id,
            )
        )

        with self.engine.connect() as conn:
            return [
                UserHealthEvent(
                    timestamp=int(row.timestamp),
                    round=int(row.round),
                    user_id=row.user_id,
                    total_collateral_value=Decimal(row.total_collateral_value),
                    total_borrow_value=Decimal(row.total_borrow_value),
                    reported_health_factor=(
                        Decimal(row.reported_health_factor)
                        if row.reported_health_factor is not None
                        else None
                    ),
                    tx_id=row.tx_id,
                )
                for row in conn.execute(stmt)
            ]

    def count_events(self, network_id: str) -> int:
        stmt = select(func.count()).select_from(user_health_events).where(
            user_health_events.c.network_id == network_id
        )

        with self.engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one())
