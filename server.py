# server.py — Gestor Predial entry point
#
# Serves the REST API the frontend talks to. All state lives in memory for
# the life of the process.
#
# Usage:
#   python server.py            # default engine (PREDIAL_ENGINE or gemini)
#   python server.py gpt        # specify engine
#   uvicorn server:app          # engine set up on startup

from __future__ import annotations

import logging
import os
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from predial.api.routes import api_router, init_api
from predial.engine.engine import setup

session: dict | None = None


def _init(engine_name: str | None = None) -> dict:
    global session
    session = setup(engine_name)
    init_api(session)
    return session


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Set up the engine if main() didn't already."""
    if session is None:
        _init()
    yield


app = FastAPI(title="Gestor Predial", lifespan=lifespan)
app.include_router(api_router, prefix="/api")


def main():
    logging.basicConfig(
        level=os.getenv("PREDIAL_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine_name = sys.argv[1] if len(sys.argv) > 1 else None

    print("\nInitializing Gestor Predial...")
    current = _init(engine_name)

    catalog = current["catalog"]
    system_count = sum(len(c.systems) for c in catalog.values())
    print(f"  Engine: {current['display']} ({current['engine_name']})")
    print(f"  AI: {'configured' if current['ai'].configured else 'NOT configured (set the API key)'}")
    print(f"  Catalog: {len(catalog)} categories, {system_count} systems")
    print(f"  Tools: {', '.join(current['workflows'])}")
    print(f"  Reports: {current['export_surface'].directory}")

    port = int(os.getenv("PORT", "8000"))
    print("\nGestor Predial is live.")
    print(f"  API:        http://localhost:{port}/api/health")
    print("\n  Press Ctrl+C to stop.\n")

    uvicorn.run(app, host="0.0.0.0", port=port, log_level="warning")


if __name__ == "__main__":
    main()
