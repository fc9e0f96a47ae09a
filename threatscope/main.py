"""
ThreatScope FastAPI Application.

Endpoints:
  POST /assess/transaction → 0-100 threat verdict for one transaction
  POST /assess/contract    → 1-10 rug-pull verdict for a token contract
  POST /assess/social      → 0-100 social-risk verdict for a corpus
  POST /decode             → calldata decode against the method table
  GET  /health             → {"status": "ok", ...}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from threatscope.api.dependencies import (
    get_contract_engine,
    get_social_engine,
    get_transaction_engine,
)
from threatscope.api.routes.assess import router as assess_router
from threatscope.api.routes.health import router as health_router
from threatscope.config import settings
from threatscope.core.errors import InvalidInput

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("threatscope")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Build every profile up front: a ConfigurationError must stop startup
    for build in (get_transaction_engine, get_contract_engine, get_social_engine):
        engine = build()
        logger.info(
            f"Profile '{engine.profile.name}' ready: {len(engine.registry.names)} detectors, "
            f"{len(engine.profile.rules)} rules"
        )
    yield


app = FastAPI(
    title="ThreatScope",
    description="Blockchain threat scoring: transactions, token contracts and social signals",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(assess_router)


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    logger.warning(f"Invalid input on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors, "message": str(exc)},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = await request.body()
    logger.error(f"Validation Error. Raw body: {body.decode('utf-8')[:500]} | Errors: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(), "body": body.decode("utf-8")[:100]},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("threatscope.main:app", host=settings.host, port=settings.port)
