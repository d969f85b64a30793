"""FastAPI application for the order-book hook.

Note: Authentication is not implemented at the application level. Order
ownership is checked per call against the owner address in the request;
authenticating that address belongs to the infrastructure in front.
"""

import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from flowhook import __version__
from flowhook.api.endpoints import NETWORK, router

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("FLOWHOOK_HOST", "0.0.0.0")
PORT = int(os.environ.get("FLOWHOOK_PORT", "8000"))
DEBUG = os.environ.get("FLOWHOOK_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

app = FastAPI(
    title="flowhook",
    description="Limit-order book hook for an AMM pool manager",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__, "network": NETWORK}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - FLOWHOOK_HOST: Host to bind to (default: 0.0.0.0)
    - FLOWHOOK_PORT: Port to bind to (default: 8000)
    - FLOWHOOK_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "flowhook.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
