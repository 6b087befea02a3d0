# app/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
import os, time, logging, sys, traceback

# quieter third-party loggers
for name in ("httpx", "httpcore", "multipart", "python_multipart"):
    logging.getLogger(name).setLevel(logging.WARNING)

# ===== logging setup =====
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    stream=sys.stdout,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
log = logging.getLogger("pdftext")

from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response as StarletteResponse

from app.models.extract_models import (
    ExtractResponse, MissingFileBody, NoTextBody, InternalErrorBody
)
from app.services.errors import ExtractionError, MissingFile, NoExtractableText, InternalFailure
from app.services.pdf_extract import extract_from_pdf_bytes, describe_upload

ALLOW_METHODS = "POST, OPTIONS"
ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: StarletteRequest, call_next):
        t0 = time.time()
        clen = request.headers.get("content-length", "-")
        try:
            log.info(f"[req] {request.method} {request.url.path} len={clen}")
            resp: StarletteResponse = await call_next(request)
            dt = int((time.time() - t0) * 1000)
            log.info(f"[res] {request.method} {request.url.path} -> {resp.status_code} {dt}ms")
            return resp
        except Exception:
            dt = int((time.time() - t0) * 1000)
            log.error(f"[res] {request.method} {request.url.path} -> 500 {dt}ms\n{traceback.format_exc()}")
            raise


class CorsHeadersMiddleware(BaseHTTPMiddleware):
    """
    Stamps the CORS headers on every response, not only on requests that
    carry an Origin header, and answers any OPTIONS preflight with an empty
    200 before routing.
    """
    def __init__(self, app, allow_origin: str = "*"):
        super().__init__(app)
        self.headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
        }

    async def dispatch(self, request: StarletteRequest, call_next):
        if request.method == "OPTIONS":
            return StarletteResponse(status_code=200, headers=self.headers)
        resp: StarletteResponse = await call_next(request)
        resp.headers.update(self.headers)
        return resp


def error_response(err: ExtractionError) -> JSONResponse:
    if isinstance(err, MissingFile):
        body = MissingFileBody(error=err.message)
    elif isinstance(err, NoExtractableText):
        body = NoTextBody(error=err.message)
    else:
        body = InternalErrorBody(error=err.message, details=err.details or "Unknown error")
    return JSONResponse(status_code=err.status_code, content=body.model_dump())


async def read_upload(request: Request) -> tuple[str, bytes]:
    """Return (filename, bytes) of the multipart field `file`, or raise MissingFile."""
    try:
        # closing the form releases spooled upload files
        async with request.form() as form:
            upload = form.get("file")
            if not isinstance(upload, StarletteUploadFile):
                log.error("[upload] no file provided or invalid file type")
                raise MissingFile()
            data = await upload.read()
            return upload.filename or "upload.pdf", data
    except (StarletteHTTPException, MultiPartException) as e:
        log.warning(f"[upload] unreadable form: {type(e).__name__}: {e}")
        raise MissingFile()


def create_app() -> FastAPI:
    app = FastAPI(title="PDF Text Extraction Backend", version="0.1.0")
    app.add_middleware(AccessLogMiddleware)
    # added last so it wraps the access log and sees every response
    app.add_middleware(CorsHeadersMiddleware, allow_origin=os.getenv("CORS_ALLOW_ORIGIN") or "*")

    @app.get("/health", tags=["meta"])
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/", tags=["meta"])
    def root() -> dict:
        return {"message": "PDF Text Extraction Backend is running"}

    @app.post("/extract-pdf-text", tags=["extract"])
    async def extract_pdf_text(request: Request) -> Response:
        """
        Multipart upload with a single `file` field. Returns the extracted text
        and an estimated page count, or one of the JSON error shapes.
        """
        log.info("[extract] starting PDF text extraction")
        try:
            filename, data = await read_upload(request)
            meta = describe_upload(filename, data)
            log.info(f"[extract] file={meta.filename!r} size={meta.size_bytes} sha256={meta.sha256[:12]}")

            result = extract_from_pdf_bytes(data)
            log.info(f"[extract] extracted {len(result.text)} characters, ~{result.page_count} pages")
            return JSONResponse(status_code=200, content=ExtractResponse.from_result(result).model_dump())
        except ExtractionError as e:
            failure = e.to_failure()
            level = logging.ERROR if e.status_code >= 500 else logging.WARNING
            log.log(level, f"[extract] {failure.model_dump(mode='json', exclude_none=True)}")
            return error_response(e)
        except Exception as e:
            log.error(f"[extract] crashed: {type(e).__name__}: {e}\n{traceback.format_exc()}")
            return error_response(InternalFailure.from_exception(e))

    return app

app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
