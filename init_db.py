#!/usr/bin/env python3
"""
Prepare the waitlist collection: connect, ensure the unique email index
and report how many entries it holds.
"""
import asyncio
import sys
import os

from dotenv import load_dotenv

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

load_dotenv()

from app.core.config import settings
from app.core.database import MongoConnector


async def init_database():
    """Connect once, create indexes, print the current count"""
    connector = MongoConnector(
        settings.MONGODB_URI,
        settings.MONGODB_DB_NAME,
        unique_indexes={settings.WAITLIST_COLLECTION: "email"},
    )
    try:
        print(f"Connecting to database '{settings.MONGODB_DB_NAME}'...")
        collection = await connector.get_collection(settings.WAITLIST_COLLECTION)
        count = await collection.count_documents({})
        print(f"Collection '{settings.WAITLIST_COLLECTION}' has {count} entries")
    finally:
        await connector.close()


if __name__ == "__main__":
    asyncio.run(init_database())
    print("Database initialization complete!")
