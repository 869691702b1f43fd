from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from pokedle.core.config import settings
from pokedle.core.db import engine, init_models
from pokedle.utils.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from pokedle.utils.router_discovery import register_routers


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncGenerator[None]:
    await init_models()
    logger.info(f"Pokedle API started ({settings.env}, rng seed {settings.rng_seed})")
    yield

    await engine.dispose()
    logger.info("Pokedle API stopped")


app = FastAPI(
    title="Pokedle API",
    summary="Guess the hidden pokemon, then capture one of three offered cards",
    lifespan=lifespan,
    servers=[{"url": "http://localhost:3011", "description": "Local server"}],
    docs_url="/docs" if settings.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_routers(app)

app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


@app.get("/")
async def healthz() -> str:
    return "OK"
