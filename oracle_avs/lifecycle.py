from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Sequence

import bittensor as bt
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

Closer = Callable[[], Awaitable[None]]


def closing_lifespan(closers: Sequence[Closer]):
    """Lifespan that closes the given HTTP clients when the server stops."""

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        for close in closers:
            try:
                await close()
            except Exception as exc:
                bt.logging.warning(f"Error closing client on shutdown: {exc}")

    return lifespan


def add_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
