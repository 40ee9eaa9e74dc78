from typing import List

from georeport.db import MongoStore
from georeport.models import LOCATIONS, REPORTS, SOURCE_REVIEWS


class RetrievalHandler:
    """Reads whole collections, most recent first."""

    def __init__(self, store: MongoStore):
        self.store = store

    async def list_reports(self) -> List[dict]:
        return await self.store.find_all_sorted(REPORTS)

    async def list_source_reviews(self) -> List[dict]:
        return await self.store.find_all_sorted(SOURCE_REVIEWS)

    async def list_locations(self) -> List[dict]:
        return await self.store.find_all_sorted(LOCATIONS)
