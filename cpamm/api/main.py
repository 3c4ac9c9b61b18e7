"""FastAPI application for the pool engine."""

import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cpamm import __version__
from cpamm.api.endpoints import router
from cpamm.errors import PoolAlreadyExists, PoolError
from cpamm.ledger import LedgerError
from cpamm.log import configure_logging

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("CPAMM_HOST", "127.0.0.1")
PORT = int(os.environ.get("CPAMM_PORT", "8000"))
DEBUG = os.environ.get("CPAMM_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="Constant Product AMM",
    description="Two-asset constant product liquidity pools",
    version=__version__,
)

app.include_router(router)


@app.exception_handler(PoolError)
async def pool_error_handler(_request: Request, exc: PoolError) -> JSONResponse:
    """Pool rejections are client errors; registry conflicts are 409."""
    status_code = 409 if isinstance(exc, PoolAlreadyExists) else 400
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(LedgerError)
async def ledger_error_handler(_request: Request, exc: LedgerError) -> JSONResponse:
    return JSONResponse(status_code=400, content=exc.to_dict())


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the pool API server.

    Configuration via environment variables:
    - CPAMM_HOST: Host to bind to (default: 127.0.0.1)
    - CPAMM_PORT: Port to bind to (default: 8000)
    - CPAMM_DEBUG: Enable debug logging and reload mode (default: false)
    - CPAMM_BASE_ASSET and PoolConfig.from_env() variables: see cpamm.service
    """
    configure_logging(debug=DEBUG)
    uvicorn.run(
        "cpamm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
