from __future__ import annotations

import logging
import os

from calendar_ai.app import app

__all__ = ["app"]

if __name__ == "__main__":
  import uvicorn

  logging.basicConfig(level=logging.INFO)
  host = os.getenv("HOST", "127.0.0.1")
  port = int(os.getenv("PORT", "8000"))
  uvicorn.run(app, host=host, port=port)
