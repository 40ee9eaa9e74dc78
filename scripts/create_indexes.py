import asyncio

from georeport.config import get_settings
from georeport.db import MongoStore


async def main():
    settings = get_settings()
    store = MongoStore(settings.mongo_uri, settings.db_name, settings.mongo_timeout_ms)
    await store.connect()
    try:
        await store.ensure_indexes()
    finally:
        await store.close()

    print("Indexes created")


asyncio.run(main())
