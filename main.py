#!/usr/bin/env python3
import logging
import os

import uvicorn

from dotacion.app import create_app
from dotacion.core.config import Settings

settings = Settings.from_env()

logging.basicConfig(
    level=logging.DEBUG if settings.is_development else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Create the FastAPI app
app = create_app(settings)


if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    print(f"Starting dotación query service on {host}:{port} ({settings.environment} mode)")

    uvicorn.run("main:app", host=host, port=port, reload=settings.is_development)
