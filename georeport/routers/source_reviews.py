import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from georeport.deps import get_retrieval, get_submissions, read_json_body
from georeport.errors import StorageError
from georeport.services.retrieval import RetrievalHandler
from georeport.services.submissions import SubmissionHandler

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/source-reviews",
    status_code=status.HTTP_201_CREATED,
    summary="Submit a review of a reference link",
)
async def submit_source_review(
    payload=Depends(read_json_body),
    handler: SubmissionHandler = Depends(get_submissions),
):
    try:
        message = await handler.submit_source_review(payload)
    except StorageError as e:
        logger.error(f"Error submitting source review: {e.cause or e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Server error while submitting source review"},
        )
    return {"message": message}


@router.get("/source-reviews", summary="List source reviews, newest first")
async def list_source_reviews(handler: RetrievalHandler = Depends(get_retrieval)):
    try:
        return await handler.list_source_reviews()
    except StorageError as e:
        logger.error(f"Error fetching source reviews: {e.cause or e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Server error while fetching source reviews"},
        )
