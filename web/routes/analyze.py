"""Page analysis routes - element inventory, raw recommendations, full pipeline."""
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from tagscope.api.gemini_client import GenerationError, build_prompt
from tagscope.browser.element_extractor import UnparsableDocumentError
from tagscope.browser.elements import elements_to_dicts
from tagscope.browser.fetcher import FetchError
from tagscope.security.filter import SecurityError

router = APIRouter()


async def _read_json(request: Request) -> Optional[dict]:
    """Return the JSON object body, or None when it is missing/invalid."""
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _extraction_failure(e: Exception) -> JSONResponse:
    """Map fetch/parse failures to the error envelope."""
    status: Optional[int] = getattr(e, "status_code", None)
    return JSONResponse(
        {
            "success": False,
            "error": "Failed to analyse page",
            "details": str(e) or "Unknown error",
            "status": status,
        },
        status_code=status or 500,
    )


# ── REST: element inventory ─────────────────────────────────────────────────

@router.post("/api/html-converter")
async def html_converter(request: Request):
    """Fetch a page and return its interactive elements."""
    body = await _read_json(request)
    url = (body or {}).get("url")
    if not url or not isinstance(url, str):
        return JSONResponse({"success": False, "error": "URL is required"}, status_code=400)

    analyzer = request.app.state.analyzer
    try:
        elements = await analyzer.extract_from_url(url)
    except SecurityError as e:
        logger.warning(f"Rejected URL {url}: {e}")
        return JSONResponse({"success": False, "error": str(e)}, status_code=400)
    except (FetchError, UnparsableDocumentError) as e:
        logger.error(f"Error analysing page {url}: {e}")
        return _extraction_failure(e)

    return JSONResponse({"success": True, "elements": elements_to_dicts(elements)})


# ── REST: raw model reply ───────────────────────────────────────────────────

@router.post("/api/gemini")
async def gemini(request: Request):
    """Send an element inventory to the model and return its raw reply."""
    body = await _read_json(request)
    if body is None:
        return JSONResponse({"error": "Invalid JSON in request body"}, status_code=400)

    payload = body.get("input")
    if not payload:
        return JSONResponse({"error": "Missing required field: input"}, status_code=400)

    use_flash = bool(body.get("useFlash", False))
    analyzer = request.app.state.analyzer
    try:
        text = await analyzer.gemini.generate_text(build_prompt(payload), use_flash=use_flash)
    except GenerationError as e:
        logger.error(f"Error generating content: {e}")
        return JSONResponse({"error": "Error generating content"}, status_code=500)

    return JSONResponse({"text": text})


# ── REST: full pipeline ─────────────────────────────────────────────────────

@router.post("/api/analyze")
async def analyze(request: Request):
    """Fetch, extract, ask the model, and return validated recommendations."""
    body = await _read_json(request)
    url = (body or {}).get("url")
    if not url or not isinstance(url, str):
        return JSONResponse({"success": False, "error": "URL is required"}, status_code=400)

    use_flash = bool(body.get("useFlash", False))
    analyzer = request.app.state.analyzer
    try:
        result = await analyzer.analyze(url, use_flash=use_flash)
    except SecurityError as e:
        logger.warning(f"Rejected URL {url}: {e}")
        return JSONResponse({"success": False, "error": str(e)}, status_code=400)
    except (FetchError, UnparsableDocumentError) as e:
        logger.error(f"Error analysing page {url}: {e}")
        return _extraction_failure(e)
    except GenerationError as e:
        logger.error(f"Error generating recommendations for {url}: {e}")
        return JSONResponse(
            {"success": False, "error": "Error generating content"}, status_code=502
        )

    return JSONResponse(result.to_dict())
