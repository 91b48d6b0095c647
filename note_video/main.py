from __future__ import annotations

import hmac
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from note_video.config import Settings, get_settings
from note_video.models.api import ErrorResponse, VideoGenerationRequest, VideoGenerationResponse
from note_video.services.video_service import NoteVideoService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

log = logging.getLogger(__name__)

_service: NoteVideoService | None = None


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    settings.validate_runtime()
    log.info("note video worker ready", extra={"port": settings.port, "bucket": settings.storage_bucket})
    yield


app = FastAPI(lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = ErrorResponse(error=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


def require_worker_secret(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    secret = settings.worker_secret_key
    expected = f"Bearer {secret}"
    if not secret or not authorization or not hmac.compare_digest(authorization.encode(), expected.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def get_video_service(settings: Settings = Depends(get_settings)) -> NoteVideoService:
    global _service
    if _service is None:
        _service = NoteVideoService.from_settings(settings)
    return _service


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post(
    "/generate-video",
    response_model=VideoGenerationResponse,
    dependencies=[Depends(require_worker_secret)],
)
async def generate_video(
    request: Request,
    service: NoteVideoService = Depends(get_video_service),
):
    try:
        payload = VideoGenerationRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required parameters.") from exc

    log.info("received /generate-video request", extra={"note_id": payload.note_id})
    try:
        video_url = await run_in_threadpool(
            service.generate_video,
            payload.note_id,
            payload.note_text,
            payload.subject_name,
        )
    except Exception as exc:
        log.exception("video generation failed", extra={"note_id": payload.note_id})
        body = ErrorResponse(error="Failed to generate video.", details=str(exc))
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())
    return VideoGenerationResponse(videoUrl=video_url)


def serve() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    serve()
