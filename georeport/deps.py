from fastapi import Request

from georeport.errors import StorageError, ValidationError
from georeport.services.retrieval import RetrievalHandler
from georeport.services.submissions import SubmissionHandler


def get_store(request: Request):
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StorageError("Database not connected")
    return store


def get_submissions(request: Request) -> SubmissionHandler:
    settings = request.app.state.settings
    return SubmissionHandler(
        get_store(request),
        getattr(request.app.state, "geocoder", None),
        enrich_reports=settings.geocoding_enabled,
    )


def get_retrieval(request: Request) -> RetrievalHandler:
    return RetrievalHandler(get_store(request))


async def read_json_body(request: Request):
    """Untyped JSON body; shape checks are left to the handlers."""
    try:
        return await request.json()
    except ValueError as e:
        raise ValidationError("Request body must be valid JSON", cause=e) from e
