import asyncio

import pytest

from georeport.errors import StorageError, UpstreamError, ValidationError
from georeport.models import REPORTS, SOURCE_REVIEWS
from georeport.services.retrieval import RetrievalHandler
from georeport.services.submissions import (
    SubmissionHandler,
    validate_location,
    validate_report,
    validate_source_review,
)


def test_nested_checks_tolerate_missing_parent():
    for location in (None, "12.9,77.6", [12.9, 77.6]):
        with pytest.raises(ValidationError):
            validate_report({"title": "t", "description": "d", "location": location})


def test_zero_is_present_but_empty_string_is_not():
    validate_location({"latitude": 0, "longitude": 0})
    with pytest.raises(ValidationError):
        validate_location({"latitude": "", "longitude": 0})
    with pytest.raises(ValidationError):
        validate_source_review({"url": "https://x.test", "description": None})


@pytest.mark.asyncio
async def test_report_record(store, fake_db, geocoder):
    handler = SubmissionHandler(store, geocoder)
    message = await handler.submit_report(
        {
            "title": "Landslide",
            "tags": ["road", "blocked", "road"],
            "description": "NH66 closed",
            "location": {"latitude": "12.9", "longitude": 74.8, "altitude": 30},
            "intensity": 4,
            "location_name": "client supplied",
        }
    )
    assert message == "Report submitted successfully"
    assert geocoder.calls == [(12.9, 74.8)]

    doc = fake_db[REPORTS].docs[0]
    assert doc["tags"] == ["road", "blocked", "road"]
    assert doc["location"] == {"latitude": 12.9, "longitude": 74.8}
    assert doc["location_name"] == "Bengaluru, Karnataka, India"
    assert doc["intensity"] == 4


@pytest.mark.asyncio
async def test_upstream_error_propagates_before_write(store, fake_db, geocoder):
    geocoder.fail_with_transport_error()
    handler = SubmissionHandler(store, geocoder)
    with pytest.raises(UpstreamError):
        await handler.submit_report(
            {"title": "t", "description": "d", "location": {"latitude": 1, "longitude": 2}}
        )
    assert fake_db.count(REPORTS) == 0


@pytest.mark.asyncio
async def test_no_geocoder_means_no_enrichment(store, fake_db):
    handler = SubmissionHandler(store, None, enrich_reports=True)
    await handler.submit_report(
        {"title": "t", "description": "d", "location": {"latitude": 1, "longitude": 2}}
    )
    assert "location_name" not in fake_db[REPORTS].docs[0]


@pytest.mark.asyncio
async def test_source_review_with_partial_location(store, fake_db):
    handler = SubmissionHandler(store)
    await handler.submit_source_review(
        {"url": "https://x.test", "description": "d", "location": {"latitude": 3}}
    )
    doc = fake_db[SOURCE_REVIEWS].docs[0]
    assert doc["location"] == {"latitude": 3}
    assert doc["tags"] == []


@pytest.mark.asyncio
async def test_storage_failure_is_not_retried(store, fake_db):
    fake_db.fail_writes = True
    handler = SubmissionHandler(store)
    with pytest.raises(StorageError):
        await handler.submit_location({"latitude": 1, "longitude": 1})


@pytest.mark.asyncio
async def test_retrieval_handler_reads_each_collection(store):
    handler = SubmissionHandler(store)
    await handler.submit_location({"latitude": 1, "longitude": 1})
    retrieval = RetrievalHandler(store)
    assert len(await retrieval.list_locations()) == 1
    assert await retrieval.list_reports() == []
    assert await retrieval.list_source_reviews() == []


class _GatedGeocoder:
    """Holds the first lookup until released so a later submission overtakes it."""

    def __init__(self):
        self.release = asyncio.Event()
        self.calls = 0

    async def reverse_geocode(self, latitude, longitude):
        self.calls += 1
        if self.calls == 1:
            await self.release.wait()
        return f"{latitude},{longitude}"


@pytest.mark.asyncio
async def test_slow_enrichment_is_stamped_at_insert(store):
    geocoder = _GatedGeocoder()
    handler = SubmissionHandler(store, geocoder)

    slow = asyncio.create_task(
        handler.submit_report(
            {"title": "slow", "description": "d", "location": {"latitude": 1, "longitude": 1}}
        )
    )
    await asyncio.sleep(0)
    await handler.submit_report(
        {"title": "fast", "description": "d", "location": {"latitude": 2, "longitude": 2}}
    )
    await asyncio.sleep(0.01)
    geocoder.release.set()
    await slow

    reports = await RetrievalHandler(store).list_reports()
    assert [r["title"] for r in reports] == ["slow", "fast"]
