"""Analyse a single page from the command line.

Requires a GOOGLE_API_KEY in the environment or .env unless
--elements-only is given.

Usage:
    python analyze_page.py https://example.com
    python analyze_page.py example.com --elements-only
"""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv
from loguru import logger

from tagscope.api.gemini_client import GenerationError
from tagscope.browser.element_extractor import UnparsableDocumentError
from tagscope.browser.elements import elements_to_dicts
from tagscope.browser.fetcher import FetchError
from tagscope.config import load_config
from tagscope.core.analyzer import TaggingAnalyzer
from tagscope.security.filter import SecurityError


def _parse_args(argv):
    parser = argparse.ArgumentParser(description="Recommend analytics tags for a webpage")
    parser.add_argument("url", help="Page URL (scheme optional)")
    parser.add_argument("--flash", action="store_true", help="Use the flash model")
    parser.add_argument(
        "--elements-only",
        action="store_true",
        help="Print the element inventory and skip the model call",
    )
    return parser.parse_args(argv)


async def run(argv) -> int:
    load_dotenv()
    args = _parse_args(argv)
    config = load_config()

    # Keep stdout clean for the JSON result
    logger.remove()
    logger.add(sys.stderr, level=config.log_level)

    analyzer = TaggingAnalyzer(config)
    try:
        if args.elements_only:
            elements = await analyzer.extract_from_url(args.url)
            output = {"success": True, "elements": elements_to_dicts(elements)}
        else:
            result = await analyzer.analyze(args.url, use_flash=args.flash)
            output = result.to_dict()
    except (SecurityError, FetchError, UnparsableDocumentError, GenerationError) as e:
        logger.error(f"Analysis failed: {e}")
        return 1
    finally:
        await analyzer.close()

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run(sys.argv[1:])))
