from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, List, Optional, Union

from bson import ObjectId
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, FiniteFloat

REPORTS = "reports"
SOURCE_REVIEWS = "sourcereviews"
LOCATIONS = "locations"

UNKNOWN_LOCATION = "Unknown Location"

# BSON stores ints as signed 64-bit
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _int64_range(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError("integer out of range")
    return value


# ints stay ints, floats stay floats; NaN and Infinity are rejected
Number = Annotated[Union[int, FiniteFloat], AfterValidator(_int64_range)]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Record(BaseModel):
    """Persisted records are never changed after insertion."""

    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    latitude: Number
    longitude: Number


class OptionalGeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    latitude: Optional[Number] = None
    longitude: Optional[Number] = None


class Report(_Record):
    title: str
    tags: List[str] = []
    description: str
    location: GeoPoint
    location_name: Optional[str] = None
    intensity: Number = 0
    timestamp: datetime = Field(default_factory=utcnow)


class SourceReview(_Record):
    url: str
    location: Optional[OptionalGeoPoint] = None
    tags: List[str] = []
    description: str
    timestamp: datetime = Field(default_factory=utcnow)


class Location(_Record):
    latitude: Number
    longitude: Number
    intensity: Number = 0
    timestamp: datetime = Field(default_factory=utcnow)


def to_document(record: _Record) -> dict:
    """Mongo document for a record; unset optional fields are left out."""
    return record.model_dump(exclude_none=True)


def _stringify(val: Any) -> Any:
    if isinstance(val, ObjectId):
        return str(val)
    if isinstance(val, datetime):
        return val.isoformat()
    return val


def serialize_doc(doc: Any) -> Any:
    """Convert Mongo ObjectIds and datetimes to JSON-serializable values."""
    if isinstance(doc, list):
        return [serialize_doc(x) for x in doc]
    if isinstance(doc, dict):
        return {k: serialize_doc(v) for k, v in doc.items()}
    return _stringify(doc)
