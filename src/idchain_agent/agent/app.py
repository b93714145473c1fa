import logging.config
from os import getenv

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from idchain_agent.agent.depends import lifespan
from idchain_agent.agent.wallet import DidNotFoundError
from idchain_agent.error import (
    BadLedgerRequestError,
    ClosedPoolError,
    LedgerObjectNotFoundError,
    LedgerRequestError,
)

from .api import ledger, wallet

LOG_LEVEL = getenv("LOG_LEVEL", "DEBUG")
logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "idchain_agent": {
                "handlers": ["default"],
                "level": LOG_LEVEL,
                "propagate": True,
            },
            "indy_vdr": {
                "handlers": ["default"],
                "level": LOG_LEVEL,
                "propagate": True,
            },
            "uvicorn": {
                "handlers": ["default"],
                "level": LOG_LEVEL,
                "propagate": True,
            },
        },
    }
)

app = FastAPI(
    title="IDChain Agent",
    summary="REST agent for the IDChain pool ledger",
    openapi_tags=[
        {
            "name": "Wallet",
            "description": "Agent wallet DIDs",
        },
        {
            "name": "Nym",
            "description": "Nym registration and attributes",
        },
        {
            "name": "Schema",
            "description": "Schema publication and retrieval",
        },
        {
            "name": "Credential Definition",
            "description": "Credential definition publication and retrieval",
        },
        {
            "name": "Revocation",
            "description": "Revocation registries",
        },
        {
            "name": "Transaction",
            "description": "Raw ledger transactions",
        },
        {
            "name": "Verifier",
            "description": "Ledger entities for proof verification",
        },
    ],
    lifespan=lifespan,
)

app.include_router(wallet.router)
app.include_router(ledger.router)


@app.exception_handler(LedgerRequestError)
async def ledger_request_error(request: Request, error: LedgerRequestError):
    """Ledger rejected the request."""
    return JSONResponse(status_code=error.status, content={"detail": error.message})


@app.exception_handler(BadLedgerRequestError)
async def bad_ledger_request(request: Request, error: BadLedgerRequestError):
    return JSONResponse(status_code=400, content={"detail": str(error)})


@app.exception_handler(LedgerObjectNotFoundError)
async def ledger_object_not_found(request: Request, error: LedgerObjectNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(error)})


@app.exception_handler(DidNotFoundError)
async def did_not_found(request: Request, error: DidNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(error)})


@app.exception_handler(ClosedPoolError)
async def closed_pool(request: Request, error: ClosedPoolError):
    return JSONResponse(status_code=503, content={"detail": str(error)})
