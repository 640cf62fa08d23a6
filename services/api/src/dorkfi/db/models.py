from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Index,
    MetaData,
    Numeric,
    String,
    Table,
)

metadata = MetaData()

user_health_events = Table(
    "user_health_events",
    metadata,
    # {network_id}:{tx_id}:{user_id}
    Column("id", String(200), primary_key=True),
    Column("network_id", String(50), nullable=False),
    Column("round", BigInteger, nullable=False),
    # Raw timestamp (unix seconds UTC)
    Column("timestamp", BigInteger, nullable=False),
    Column("timestamp_hour", DateTime(timezone=True), nullable=False),
    Column("tx_id", String(64), nullable=True),
    Column("user_id", String(64), nullable=False),
    # USD values, descaled from 1e12
    Column("total_collateral_value", Numeric(38, 12), nullable=False),
    Column("total_borrow_value", Numeric(38, 12), nullable=False),
    # Contract-reported health factor, descaled from 1e6
    Column("reported_health_factor", Numeric(38, 6), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=True),
    Index("idx_user_health_cursor", "network_id", "round"),
    Index("idx_user_health_user", "network_id", "user_id", "timestamp"),
)
