import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from georeport.deps import get_retrieval, get_submissions, read_json_body
from georeport.errors import StorageError
from georeport.services.retrieval import RetrievalHandler
from georeport.services.submissions import SubmissionHandler

logger = logging.getLogger(__name__)

router = APIRouter()


# singular on write, plural on read
@router.post("/location", status_code=status.HTTP_201_CREATED, summary="Save a location sample")
async def save_location(
    payload=Depends(read_json_body),
    handler: SubmissionHandler = Depends(get_submissions),
):
    try:
        message = await handler.submit_location(payload)
    except StorageError as e:
        logger.error(f"Error saving location: {e.cause or e}")
        return JSONResponse(
            status_code=500, content={"error": "Server error while saving location"}
        )
    return {"message": message}


@router.get("/locations", summary="List location samples, newest first")
async def list_locations(handler: RetrievalHandler = Depends(get_retrieval)):
    try:
        return await handler.list_locations()
    except StorageError as e:
        logger.error(f"Error fetching locations: {e.cause or e}")
        return JSONResponse(
            status_code=500, content={"error": "Server error while fetching locations"}
        )
