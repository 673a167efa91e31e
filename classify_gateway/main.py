from __future__ import annotations
"""classify-gateway: HTTP front end for the `classify` executable.

POST /classify takes one image, either base64 in a JSON body or as the
`image` part of a multipart form, runs the classifier on it and returns
the classifier's output as an HTML fragment.
"""

import asyncio
import os
import uuid
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from importlib import resources
from typing import Optional

import structlog
from structlog.contextvars import bound_contextvars
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import HTMLResponse, JSONResponse

from .config import Settings, settings as default_settings
from .cors import install_cors
from .decoders import (
    JSON_TYPE,
    ImageSource,
    check_media_type,
    from_form,
    from_json,
    read_form,
)
from .errors import GatewayError
from .invoker import Classifier, ClassificationOutcome, SubprocessClassifier, invoke
from .render import render_result
from .scratch import scratch_file

log = structlog.get_logger()


def _load_index(settings: Settings) -> str:
    if settings.index_page is not None:
        return settings.index_page.read_text(encoding="utf-8")
    return resources.files("classify_gateway").joinpath("static/index.html").read_text(encoding="utf-8")


def create_app(
    settings: Optional[Settings] = None,
    classifier: Optional[Classifier] = None,
) -> FastAPI:
    settings = settings or default_settings
    classifier = classifier or SubprocessClassifier(settings.command, settings.timeout)
    index_html = _load_index(settings)

    # subprocess calls block, so they run here instead of on the event loop
    pool = ThreadPoolExecutor(max_workers=settings.workers)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info(
            "startup",
            cwd=os.getcwd(),
            command=settings.command,
            input_mode=settings.input_mode,
            workers=settings.workers,
        )
        yield
        pool.shutdown(wait=True)
        log.info("shutdown_complete")

    app = FastAPI(title="classify-gateway", version="1.0.0", lifespan=lifespan)
    install_cors(app)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        # diagnostics were logged where the error was raised; clients get the status only
        return Response(status_code=exc.status_code)

    def _classify(source: ImageSource, request_id: str) -> ClassificationOutcome:
        with scratch_file(source.data, settings.scratch_dir) as path:
            return invoke(classifier, path, request_id)

    async def _run(source: ImageSource, request_id: str) -> str:
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(pool, _classify, source, request_id)
        return render_result(outcome, draw_again=source.draw_again)

    @app.get("/", response_class=HTMLResponse)
    async def index():
        return HTMLResponse(index_html)

    @app.post("/classify", response_class=HTMLResponse)
    async def classify(raw: Request):
        """Classify the single image in the request body."""
        request_id = raw.headers.get("X-Request-ID", str(uuid.uuid4()))
        with bound_contextvars(request_id=request_id):
            log.info("request_received")
            kind = check_media_type(raw, settings.input_mode)

            if kind == JSON_TYPE:
                source = await from_json(raw)
                body = await _run(source, request_id)
            else:
                form = await read_form(raw)
                try:
                    source = from_form(form)
                    body = await _run(source, request_id)
                finally:
                    await form.close()

            log.info("response_ready", size=len(body))
            return HTMLResponse(body)

    @app.options("/classify")
    async def classify_preflight():
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/health")
    async def health():
        """Readiness probe."""
        return JSONResponse({"ok": True})

    return app


app = create_app()


def serve() -> None:
    import uvicorn
    uvicorn.run(
        "classify_gateway.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    serve()
