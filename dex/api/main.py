"""FastAPI application for the exchange.

Every DexError raised by the registry, pools or ledger is turned into a JSON
body of the form {"error": <class name>, "detail": <message>}.
"""

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse

from dex import __version__
from dex.api.endpoints import Exchange, get_exchange, router
from dex.api.schemas import ErrorResponse
from dex.config import DexConfig
from dex.errors import (
    AssetExists,
    CustodyInUse,
    DexError,
    PairExists,
    PoolNotFound,
    UnknownAsset,
)
from dex.log_config import configure_logging

logger = structlog.get_logger()

# Errors that map to something other than 400 Bad Request
ERROR_STATUS: dict[type[DexError], int] = {
    PairExists: status.HTTP_409_CONFLICT,
    AssetExists: status.HTTP_409_CONFLICT,
    CustodyInUse: status.HTTP_409_CONFLICT,
    PoolNotFound: status.HTTP_404_NOT_FOUND,
    UnknownAsset: status.HTTP_404_NOT_FOUND,
}

config = DexConfig.from_env()
configure_logging(config)

app = FastAPI(
    title="Two-asset exchange",
    description="Constant-product liquidity pools over an in-memory asset ledger",
    version=__version__,
)


@app.exception_handler(DexError)
async def dex_error_handler(request: Request, exc: DexError) -> JSONResponse:
    """Map exchange errors to client errors."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        detail=str(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
    )


app.include_router(
    router,
    responses={code: {"model": ErrorResponse} for code in (400, 404, 409)},
)


@app.get("/health")
def health(exchange: Exchange = Depends(get_exchange)) -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "pools": exchange.registry.count()}


def run() -> None:
    """Run the exchange API server.

    Configuration via environment variables:
    - DEX_HOST: Host to bind to (default: 0.0.0.0)
    - DEX_PORT: Port to bind to (default: 8000)
    - DEX_DEBUG: Enable reload mode (default: false)
    """
    uvicorn.run(
        "dex.api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
    )


if __name__ == "__main__":
    run()
