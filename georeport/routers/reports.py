import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from georeport.deps import get_retrieval, get_submissions, read_json_body
from georeport.errors import StorageError, UpstreamError
from georeport.services.retrieval import RetrievalHandler
from georeport.services.submissions import SubmissionHandler

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reports", status_code=status.HTTP_201_CREATED, summary="Submit a report")
async def submit_report(
    payload=Depends(read_json_body),
    handler: SubmissionHandler = Depends(get_submissions),
):
    try:
        message = await handler.submit_report(payload)
    except (UpstreamError, StorageError) as e:
        logger.error(f"Error submitting report: {e.cause or e}")
        return JSONResponse(
            status_code=500, content={"error": "Server error while submitting report"}
        )
    return {"message": message}


@router.get("/reports", summary="List reports, newest first")
async def list_reports(handler: RetrievalHandler = Depends(get_retrieval)):
    try:
        return await handler.list_reports()
    except StorageError as e:
        logger.error(f"Error fetching reports: {e.cause or e}")
        return JSONResponse(
            status_code=500, content={"error": "Server error while fetching reports"}
        )
