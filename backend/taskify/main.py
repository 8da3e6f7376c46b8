import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from taskify import config
from taskify.api import analytics, auth, notes, search, tasks
from taskify.storage.errors import StoreError

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Taskify API")

app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(notes.router)
app.include_router(search.router)
app.include_router(analytics.router)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Storage error"})


@app.get("/health")
def health():
    return {"ok": True}
