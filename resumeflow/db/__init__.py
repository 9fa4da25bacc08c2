"""
Database module - PostgreSQL (records) and MongoDB GridFS (file bytes).
"""
from resumeflow.db.postgres import get_db, test_postgres_connection
from resumeflow.db.storage import GridFSBlobStore, get_mongo_db, test_mongo_connection

__all__ = [
    "get_db",
    "test_postgres_connection",
    "GridFSBlobStore",
    "get_mongo_db",
    "test_mongo_connection"
]
