"""
Entrypoint: load config, init logging, create the shared fetcher and
serve the page relay endpoint.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from relay.access import is_request_allowed
from relay.config import config
from relay.errors import BadRequest, Forbidden, RelayError, UnhandledError
from relay.fetcher import DEFAULT_USER_AGENT, HTTPFetcher
from relay.relay import MAX_REDIRECTS, PageRelay

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, str(level).upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class RelayResponse(BaseModel):
    contents: str
    finalUrl: str


class ErrorResponse(BaseModel):
    error: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared HTTP client on startup and close it on shutdown."""
    fetcher_config = config.fetcher
    fetcher = HTTPFetcher(
        user_agent=fetcher_config.get('user_agent', DEFAULT_USER_AGENT),
        timeout=float(fetcher_config.get('timeout', 30.0)),
        max_redirects=int(fetcher_config.get('max_transport_redirects', 20)),
    )
    app.state.relay = PageRelay(
        fetcher,
        max_redirects=int(config.relay.get('max_redirects', MAX_REDIRECTS)),
        charset_sniff_bytes=int(fetcher_config.get('charset_sniff_bytes', 1024)),
    )
    logger.info("relay_started", user_agent=fetcher.user_agent, max_redirects=app.state.relay.max_redirects)

    yield

    await fetcher.close()
    logger.info("relay_stopped")


configure_logging(config.logging.get('level', 'INFO'))

app = FastAPI(title="Page Relay", description="Fetch remote pages on behalf of the browser", lifespan=lifespan)

if config.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=exc.message).model_dump())


def get_relay(request: Request) -> PageRelay:
    return request.app.state.relay


@app.get("/api/proxy", response_model=RelayResponse, responses={
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
})
async def proxy(request: Request, url: Optional[str] = Query(None), relay: PageRelay = Depends(get_relay)):
    """
    Fetch `url` server side, follow meta refreshes and return the decoded
    HTML with the URL it was finally served from.
    """
    if not url:
        raise BadRequest("URL parameter is required")

    host = request.headers.get("host")
    referer = request.headers.get("referer")
    if not is_request_allowed(host, referer, config.local_hosts):
        raise Forbidden("Forbidden: External access denied")

    try:
        result = await relay.fetch_page(url)
        return RelayResponse(**result.to_dict())
    except RelayError:
        raise
    except Exception as e:
        logger.error("relay_failed", url=url, error=str(e), exc_info=True)
        raise UnhandledError(str(e))


@app.get("/health")
async def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.server.get('host', '0.0.0.0'), port=int(config.server.get('port', 8000)))
