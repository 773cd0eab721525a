"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from converter import config
from converter.api.routes import WARNINGS_HEADER, failure, router
from converter.config import CORS_ORIGINS, STATIC_DIR, logger as config_logger
from converter.exceptions import ConverterError

logging.getLogger("uvicorn").setLevel(logging.INFO)
logger = logging.getLogger("converter.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    config_logger.info("Converter API started")
    yield
    config_logger.info("Converter API shutting down")


class PayloadLimitMiddleware:
    """
    Reject request bodies over MAX_PAYLOAD_BYTES with a 413 failure.
    Declared Content-Length is checked up front; chunked bodies are counted as they
    stream in and the request is cut off before any route code sees the parsed form.
    """

    def __init__(self, app):
        self.app = app

    async def _reject(self, scope, receive, send, size) -> None:
        logger.warning("Rejected %s %s: %s bytes", scope.get("method"), scope.get("path"), size)
        response = failure(f"Payload too large (max {config.MAX_PAYLOAD_MB} MB)", status_code=413)
        await response(scope, receive, send)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        limit = config.MAX_PAYLOAD_BYTES
        content_length = Request(scope).headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > limit:
            await self._reject(scope, receive, send, content_length)
            return

        received = 0
        exceeded = False

        async def limited_receive():
            nonlocal received, exceeded
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    exceeded = True
                    raise HTTPException(413, "Payload too large")
            return message

        async def guarded_send(message):
            # whatever the app renders for the aborted body is replaced by the 413 below
            if not exceeded:
                await send(message)

        try:
            await self.app(scope, limited_receive, guarded_send)
        except Exception:
            if not exceeded:
                raise
        if exceeded:
            await self._reject(scope, receive, send, f">{limit}")


app = FastAPI(
    title="Web Image Converter API",
    description="Convert images to progressive JPEG, WebP and AVIF and download them as one zip.",
    version="1.0.0",
    lifespan=lifespan,
)
# Last added is outermost: CORS wraps the payload limiter so its 413s carry CORS headers.
app.add_middleware(PayloadLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", WARNINGS_HEADER],
)


@app.exception_handler(ConverterError)
async def converter_error_handler(request: Request, exc: ConverterError):
    if exc.status_code >= 500:
        logger.error("Conversion request failed: %s", exc.message)
    else:
        logger.warning("Conversion request failed: %s", exc.message)
    return failure(exc.message, status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return failure("Internal server error", status_code=500)


@app.get("/", include_in_schema=False)
def index():
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")


app.include_router(router)


def run(reload: bool = False):
    import uvicorn
    from converter.config import HOST, PORT
    uvicorn.run("converter.main:app", host=HOST, port=PORT, reload=reload)


if __name__ == "__main__":
    run(reload=True)
