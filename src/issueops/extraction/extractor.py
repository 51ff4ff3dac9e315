"""Best-effort extraction of candidate actions from free text.

Issue bodies, comments and LLM replies may carry an action either as the
whole text (plain JSON) or inside a fenced code block::

    ```json
    {"domain": "team-management", "type": "ADD_TO_TEAM",
     "payload": {"username": "bob", "teamName": "frontend"}}
    ```

Only the shape is checked here (``domain`` and ``type`` strings, ``payload``
object). Schema validation belongs to the domain registry.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from issueops.core.errors import ExtractionError
from issueops.core.models import Action

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[ \t]*(?:json)?[ \t]*\r?\n?(.*?)```", re.DOTALL | re.IGNORECASE)

_CONFIRM_WORDS = frozenset({"approve", "approved", "confirm", "confirmed"})


def _shape_ok(obj: Any) -> bool:
    return (
        isinstance(obj, dict)
        and isinstance(obj.get("domain"), str)
        and isinstance(obj.get("type"), str)
        and isinstance(obj.get("payload"), dict)
    )


def _as_action(candidate: str) -> Action | None:
    try:
        obj = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    if not _shape_ok(obj):
        return None
    return Action(domain=obj["domain"], type=obj["type"], payload=obj["payload"])


def extract_all_actions(text: str) -> list[Action]:
    """Every well-shaped action in *text*, in order of appearance."""
    if not text or not text.strip():
        return []

    direct = _as_action(text.strip())
    if direct is not None:
        return [direct]

    actions: list[Action] = []
    for block in _FENCE_RE.findall(text):
        action = _as_action(block.strip())
        if action is not None:
            actions.append(action)
        else:
            logger.debug("Ignoring fenced block without a valid action")
    return actions


def extract_action(text: str, *, strict: bool = False) -> Action | None:
    """First candidate action in *text*.

    Returns ``None`` when nothing is found, or raises ``ExtractionError``
    if *strict* is set.
    """
    actions = extract_all_actions(text)
    if actions:
        return actions[0]
    if strict:
        raise ExtractionError(
            "No action found. The text should contain a JSON object with "
            "domain, type, and payload properties."
        )
    return None


def is_confirmation(text: str) -> bool:
    """True if a reply confirms a proposed action ("approve" / "confirm")."""
    for line in (text or "").splitlines():
        words = re.findall(r"[a-z]+", line.lower())
        if words:
            return len(words) <= 3 and words[0] in _CONFIRM_WORDS
    return False
