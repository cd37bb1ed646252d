"""
Writing styles for the Writer Agent.

Styles are managed elsewhere and stored in the writing_styles collection;
this module only resolves the one to use for a generation.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_STYLE_SLUG = "strategic-writing"

DEFAULT_STYLE: Dict[str, Any] = {
    "slug": DEFAULT_STYLE_SLUG,
    "name": "Strategic Writing",
    "micro_prompt": (
        "Write like a senior strategy consultant. Use clear, connected paragraphs "
        "with minimal bullets and executive-level reasoning."
    ),
    "system_prompt": (
        "You are a senior strategy consultant writing polished thought leadership. "
        "Write cohesive, analytical paragraphs with a clear arc: framing, analysis, "
        "implications, conclusion. Stay objective and avoid hype."
    ),
}


def resolve_writing_style(db, style_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Return the requested style, falling back to the stored default style and
    then to the built-in default.
    """
    style = None
    if style_id:
        style = db.writing_styles.find_one({"_id": style_id})
        if not style:
            logger.warning("Writing style %s not found, using default", style_id)
    if not style:
        style = db.writing_styles.find_one({"is_default": True})
    if not style:
        return dict(DEFAULT_STYLE)

    return {
        "slug": style.get("slug", DEFAULT_STYLE_SLUG),
        "name": style.get("name", DEFAULT_STYLE["name"]),
        "micro_prompt": style.get("micro_prompt") or DEFAULT_STYLE["micro_prompt"],
        "system_prompt": style.get("system_prompt") or DEFAULT_STYLE["system_prompt"],
    }
