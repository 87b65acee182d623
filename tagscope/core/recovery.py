"""Output Recovery Parser - tolerant parsing of model recommendation replies.

The model is asked for a JSON array but commonly answers with the array
wrapped in a ```json fence, cut off mid-object, or carrying a dangling
comma. ``repair_model_output`` applies a fixed sequence of string-level
repairs; ``recover_recommendations`` parses the result strictly and
validates each record field by field.

The repair steps run in a fixed order. Reordering them changes which
malformed replies recover, so they stay as they are.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from loguru import logger

UNKNOWN_ELEMENT = "Unknown Element"
NO_REASON = "No reason provided"

_OPENING_FENCE = "```json\n"
_CLOSING_FENCE = "\n```"
_TRAILING_COMMA = re.compile(r",(\s*[\]}])")


@dataclass
class Recommendation:
    """One ranked tagging recommendation."""

    element: str
    reason: str
    selector_code: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {"element": self.element, "reason": self.reason}
        if self.selector_code is not None:
            data["selectorCode"] = self.selector_code
        return data


def repair_model_output(raw_text: str) -> str:
    """Apply the fence/truncation/trailing-comma repairs to a model reply."""
    text = raw_text
    if text.startswith(_OPENING_FENCE):
        text = text[len(_OPENING_FENCE):]
    if text.endswith(_CLOSING_FENCE):
        text = text[: -len(_CLOSING_FENCE)]
    text = text.strip()

    # Assume the array was intact up to the last complete object
    last_brace = text.rfind("}")
    if last_brace != -1:
        text = text[: last_brace + 1] + "]"

    return _TRAILING_COMMA.sub(r"\1", text)


def _string_or(value: Any, default: Optional[str]) -> Optional[str]:
    return value if isinstance(value, str) else default


def build_recommendation(record: Any) -> Recommendation:
    """Validate one parsed record, defaulting bad fields independently."""
    if not isinstance(record, dict):
        record = {}

    selector = record.get("selector_code", record.get("selectorCode"))
    return Recommendation(
        element=_string_or(record.get("element"), UNKNOWN_ELEMENT),
        reason=_string_or(record.get("reason"), NO_REASON),
        selector_code=_string_or(selector, None),
    )


def recover_recommendations(raw_text: str) -> List[Recommendation]:
    """Recover an ordered recommendation list from raw model text.

    Never raises for bad model output: anything that still fails to parse
    after repair yields an empty list.

    Args:
        raw_text: Reply text from the generative model

    Returns:
        Recommendations in the order the model ranked them
    """
    if not isinstance(raw_text, str) or not raw_text:
        logger.warning("[Recovery] Empty model output, no recommendations")
        return []

    cleaned = repair_model_output(raw_text)
    logger.debug(f"[Recovery] Cleaned model output: {cleaned[:500]}")

    try:
        parsed = json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        # ValueError also covers the int-digit limit; deep nesting recurses out
        logger.warning(f"[Recovery] Failed to parse recommendations JSON: {e}")
        return []

    if not isinstance(parsed, list):
        logger.warning(
            f"[Recovery] Expected a JSON array, got {type(parsed).__name__}"
        )
        return []

    recommendations = [build_recommendation(rec) for rec in parsed]
    logger.info(f"[Recovery] Recovered {len(recommendations)} recommendation(s)")
    return recommendations


def recommendations_to_dicts(recommendations: List[Recommendation]) -> List[Dict[str, str]]:
    return [rec.to_dict() for rec in recommendations]
