from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ALLOW_ORIGIN_REGEX, cors_origins
from .database import build_supabase_client
from .llm import build_async_client
from .routes import router

logger = logging.getLogger(__name__)


def create_app(openai_client: Optional[Any] = None,
               supabase_client: Optional[Any] = None) -> FastAPI:
  """Build the API app. Clients passed in win over the ones built from env."""

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    app.state.openai_client = openai_client or build_async_client()
    app.state.supabase_client = supabase_client or build_supabase_client()
    logger.info("calendar-ai ready: openai=%s supabase=%s",
                app.state.openai_client is not None,
                app.state.supabase_client is not None)
    yield
    client = app.state.openai_client
    if client is not None and openai_client is None:
      await client.close()

  app = FastAPI(title="Calendar AI", lifespan=lifespan)
  app.state.openai_client = openai_client
  app.state.supabase_client = supabase_client

  if cors_origins or CORS_ALLOW_ORIGIN_REGEX:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_origin_regex=CORS_ALLOW_ORIGIN_REGEX or None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

  app.include_router(router)

  @app.get("/health")
  def health():
    return {"ok": True}

  return app


app = create_app()
