"""FastAPI application factory."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from web.routes.analyze import router as analyze_router


def create_app(config, analyzer) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application settings (tagscope.config.Settings)
        analyzer: TaggingAnalyzer instance shared by all requests
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("TagScope web server starting up")
        yield
        logger.info("TagScope web server shutting down")
        await analyzer.close()

    app = FastAPI(title="TagScope", version="1.0.0", lifespan=lifespan)

    app.state.config = config
    app.state.analyzer = analyzer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(analyze_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
