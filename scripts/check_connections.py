#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the service's external dependencies are reachable.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from resumeflow.core.config import get_settings
from resumeflow.db.postgres import test_postgres_connection
from resumeflow.db.storage import test_mongo_connection


def main():
    settings = get_settings()
    print("=" * 50)
    print("RESUME INGESTION - CONNECTION CHECK")
    print("=" * 50)

    # PostgreSQL
    print("\n[1] Checking PostgreSQL...")
    print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if test_postgres_connection():
        print("    ✅ PostgreSQL: CONNECTED")
    else:
        print("    ❌ PostgreSQL: FAILED")

    # MongoDB / GridFS
    print("\n[2] Checking MongoDB storage...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}  Bucket: {settings.storage_bucket}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")

    # OCR (configuration only - a real call costs quota)
    print("\n[3] Checking OCR configuration...")
    if settings.ocr_configured:
        print(f"    ✅ OCR: configured ({settings.ocr_space_url}, engine {settings.ocr_engine})")
    else:
        print("    ⚠️  OCR: OCR_SPACE_API_KEY not set - scanned PDFs will be reported unsupported")

    # Scoring
    print("\n[4] Checking scoring API configuration...")
    if settings.deepseek_api_key:
        print(f"    ✅ Scoring: configured ({settings.deepseek_base_url}, model {settings.scoring_model})")
    else:
        print("    ⚠️  Scoring: DEEPSEEK_API_KEY not set - /resumes/analyze will fail")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
