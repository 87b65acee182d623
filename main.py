"""Main entry point for TagScope - web edition."""
import asyncio
import sys
from pathlib import Path

from loguru import logger

from tagscope.config import load_config
from tagscope.core.analyzer import TaggingAnalyzer
from tagscope.utils.logging_config import setup_logging


async def main():
    """Main application entry point."""
    config = load_config()
    setup_logging(level=config.log_level, log_dir=Path(config.log_dir))
    logger.info("Starting TagScope (web mode)")

    if not config.google_api_key:
        logger.warning(
            "No GOOGLE_API_KEY found. Element extraction works, recommendations will fail."
        )

    try:
        analyzer = TaggingAnalyzer(config)

        from web.server import create_app
        app = create_app(config, analyzer)

        import uvicorn
        logger.info(f"TagScope API -> http://{config.host}:{config.port}")

        config_uv = uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            log_level="warning",
            log_config=None,
            loop="asyncio",
        )
        server = uvicorn.Server(config_uv)
        await server.serve()

    except Exception:
        logger.exception("Fatal error during startup")
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
    except Exception:
        logger.exception("Application failed to start")
        sys.exit(1)
