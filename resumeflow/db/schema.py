"""
Relational schema - users, resumes and the rate-limit event log.

Tables are declared with SQLAlchemy Core so the same definitions create the
PostgreSQL schema in production and the SQLite schema in tests.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)

metadata = MetaData()


users = Table(
    "users",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False, server_default="candidate"),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)


resumes = Table(
    "resumes",
    metadata,
    Column("resume_id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("file_name", String(255), nullable=False),
    Column("size_bytes", Integer, nullable=False),
    Column("declared_mime_type", String(255), nullable=False),
    Column("storage_key", String(500), nullable=False, unique=True),
    Column("detected_format", String(10)),
    # non-null only while extraction_status = 'text_extracted'
    Column("text_content", Text),
    Column("extraction_status", String(30), nullable=False, server_default="uploaded"),
    Column("extraction_reason", Text),
    Column("ats_score", Integer),
    Column("ats_feedback", JSON),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)


# Append-only. Rows older than the longest window are expired at read time;
# the periodic purge only bounds table growth.
api_rate_limits = Table(
    "api_rate_limits",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False),
    Column("endpoint", String(100), nullable=False),
    Column("window_start", DateTime(timezone=True), nullable=False),
    Index("ix_api_rate_limits_lookup", "user_id", "endpoint", "window_start"),
)


def create_schema(engine) -> None:
    """Create all tables that do not exist yet."""
    metadata.create_all(engine)
