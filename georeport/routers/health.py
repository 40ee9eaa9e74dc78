from fastapi import APIRouter, Request

router = APIRouter()


@router.get("", summary="Liveness and database reachability")
async def health(request: Request):
    store = getattr(request.app.state, "store", None)
    database = await store.ping() if store is not None else False
    return {"status": "ok", "database": database}
