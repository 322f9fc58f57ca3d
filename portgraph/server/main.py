"""
FastAPI server exposing one graph editing session.

Start with:
    python -m portgraph.server.main

Or via uvicorn directly:
    uvicorn portgraph.server.main:app --port 3001 --reload
"""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portgraph import __version__
from portgraph.config import get_settings
from portgraph.logger import configure_logging
from portgraph.server.routes.graph_routes import router

settings = get_settings()
configure_logging(settings.log_level)

# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title="PortGraph API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "portgraph.server.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
