"""
Blob storage for uploaded resume files - MongoDB GridFS.

The pipeline only needs three things from storage: put bytes under a key,
read them back, delete them. GridFSBlobStore implements that over one GridFS
bucket; the file's GridFS `filename` is the storage key.

WHY GridFS?
- Resumes can be up to 10MB; GridFS stores them in chunks instead of one
  large BSON document
- Keeps binary files out of the relational database
"""
import logging
from typing import Optional

import gridfs
from gridfs.errors import NoFile
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from resumeflow.core.config import Settings, get_settings
from resumeflow.core.errors import NotFoundError, TransientExternalError

logger = logging.getLogger(__name__)

# Process-wide client (connection pooling handled internally by pymongo)
_client: Optional[MongoClient] = None


def get_mongo_client(settings: Optional[Settings] = None) -> MongoClient:
    """Get or create the MongoDB client."""
    global _client
    if _client is None:
        settings = settings or get_settings()
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db(settings: Optional[Settings] = None) -> Database:
    settings = settings or get_settings()
    return get_mongo_client(settings)[settings.mongodb_db]


class GridFSBlobStore:
    """
    Read / write / delete resume bytes by storage key.
    """

    def __init__(self, db: Database, bucket: str = "resumes"):
        self.fs = gridfs.GridFS(db, collection=bucket)
        self.bucket = bucket

    def upload(self, key: str, data: bytes, content_type: Optional[str] = None, owner_id: Optional[int] = None) -> None:
        try:
            self.fs.put(
                data,
                filename=key,
                content_type=content_type,
                metadata={"owner_id": owner_id}
            )
        except PyMongoError as e:
            logger.exception("Failed to store %s", key)
            raise TransientExternalError("Failed to store file") from e

    def download(self, key: str) -> bytes:
        """
        Fetch the newest version stored under `key`.

        Raises:
            NotFoundError: nothing stored under the key
            TransientExternalError: storage unreachable
        """
        try:
            return self.fs.get_last_version(filename=key).read()
        except NoFile:
            raise NotFoundError("File not found in storage")
        except PyMongoError as e:
            logger.error("Download error for %s: %s", key, e)
            raise TransientExternalError("Failed to download file") from e

    def delete(self, key: str) -> bool:
        """Remove every version stored under `key`. Returns True if anything was removed."""
        removed = False
        try:
            for grid_out in self.fs.find({"filename": key}):
                self.fs.delete(grid_out._id)
                removed = True
        except PyMongoError as e:
            logger.error("Delete error for %s: %s", key, e)
            raise TransientExternalError("Failed to delete file") from e
        return removed


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        get_mongo_client().admin.command("ping")
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False
