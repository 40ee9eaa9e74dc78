import logging
from typing import Any, Optional, Protocol

import pydantic

from georeport.db import MongoStore
from georeport.errors import ValidationError
from georeport.models import (
    LOCATIONS,
    REPORTS,
    SOURCE_REVIEWS,
    UNKNOWN_LOCATION,
    Location,
    Report,
    SourceReview,
    to_document,
    utcnow,
)

logger = logging.getLogger(__name__)

REPORT_REQUIRED = "Title, Description, and Location (latitude, longitude) are required"
SOURCE_REVIEW_REQUIRED = "URL and Description are required"
LOCATION_REQUIRED = "Latitude and Longitude are required"


class Geocoder(Protocol):
    async def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        ...


def _present(value: Any) -> bool:
    # 0 is a valid coordinate, so only null and empty strings count as absent
    return value is not None and value != ""


def _nested(payload: dict, parent: str, key: str) -> Any:
    obj = payload.get(parent)
    if not isinstance(obj, dict):
        return None
    return obj.get(key)


def _require_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def validate_report(payload: Any) -> dict:
    payload = _require_object(payload)
    required = (
        payload.get("title"),
        payload.get("description"),
        _nested(payload, "location", "latitude"),
        _nested(payload, "location", "longitude"),
    )
    if not all(_present(v) for v in required):
        raise ValidationError(REPORT_REQUIRED)
    return payload


def validate_source_review(payload: Any) -> dict:
    payload = _require_object(payload)
    if not (_present(payload.get("url")) and _present(payload.get("description"))):
        raise ValidationError(SOURCE_REVIEW_REQUIRED)
    return payload


def validate_location(payload: Any) -> dict:
    payload = _require_object(payload)
    if not (_present(payload.get("latitude")) and _present(payload.get("longitude"))):
        raise ValidationError(LOCATION_REQUIRED)
    return payload


def _build(model, fields: dict):
    # intensity/tags sent as null fall back to the model defaults
    fields = {k: v for k, v in fields.items() if v is not None}
    try:
        return model(**fields)
    except pydantic.ValidationError as e:
        bad = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationError(f"Invalid value for: {bad}", cause=e) from e


class SubmissionHandler:
    """
    Validates a raw payload, optionally enriches it, and writes one record.

    Validation happens before any I/O, so a rejected payload never reaches
    the geocoder or the store.
    """

    def __init__(
        self,
        store: MongoStore,
        geocoder: Optional[Geocoder] = None,
        enrich_reports: bool = True,
    ):
        self.store = store
        self.geocoder = geocoder
        self.enrich_reports = enrich_reports and geocoder is not None

    async def _insert(self, collection: str, record) -> str:
        # stamped at write time, after any enrichment await
        record = record.model_copy(update={"timestamp": utcnow()})
        return await self.store.insert(collection, to_document(record))

    async def submit_report(self, payload: Any) -> str:
        payload = validate_report(payload)
        location = payload["location"]
        fields = {
            "title": payload["title"],
            "tags": payload.get("tags"),
            "description": payload["description"],
            "location": {
                "latitude": location["latitude"],
                "longitude": location["longitude"],
            },
            "intensity": payload.get("intensity"),
        }
        report = _build(Report, fields)

        if self.enrich_reports:
            name = await self.geocoder.reverse_geocode(
                report.location.latitude, report.location.longitude
            )
            report = report.model_copy(update={"location_name": name or UNKNOWN_LOCATION})

        inserted_id = await self._insert(REPORTS, report)
        logger.info(f"Report {inserted_id} stored ({report.location_name or 'no place name'})")
        return "Report submitted successfully"

    async def submit_source_review(self, payload: Any) -> str:
        payload = validate_source_review(payload)
        fields = {
            "url": payload["url"],
            "location": payload.get("location"),
            "tags": payload.get("tags"),
            "description": payload["description"],
        }
        review = _build(SourceReview, fields)
        inserted_id = await self._insert(SOURCE_REVIEWS, review)
        logger.info(f"Source review {inserted_id} stored")
        return "Source review submitted successfully"

    async def submit_location(self, payload: Any) -> str:
        payload = validate_location(payload)
        fields = {
            "latitude": payload["latitude"],
            "longitude": payload["longitude"],
            "intensity": payload.get("intensity"),
        }
        sample = _build(Location, fields)
        inserted_id = await self._insert(LOCATIONS, sample)
        logger.info(f"Location {inserted_id} stored")
        return "Location saved successfully"
