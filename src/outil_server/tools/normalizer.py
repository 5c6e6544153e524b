"""Payload normalization and repair.

normalize() is applied to every raw payload before decoding. It only trims
whitespace and wire markers left at the edges of the payload.

repair_doubled_braces() is the one repair pass. Some chat templates escape
braces by doubling them, so a model imitating the template may emit
{{"name": ...}}. The decoder only tries this pass after a plain parse has
failed, and only when repair is enabled in settings.
"""

from outil_server.tools.scanner import ALL_MARKERS


def normalize(raw_payload: str) -> str:
    """Trim whitespace and residual wire markers from a raw payload.

    Args:
        raw_payload: Text captured between a directive's markers

    Returns:
        Candidate text expected to hold a single JSON object
    """
    text = raw_payload.strip()
    changed = True
    while changed:
        changed = False
        for marker in ALL_MARKERS:
            if text.startswith(marker):
                text = text[len(marker) :].strip()
                changed = True
            if text.endswith(marker):
                text = text[: -len(marker)].strip()
                changed = True
    return text


def repair_doubled_braces(text: str) -> str | None:
    """Collapse template-style doubled braces.

    Only applies when the whole payload is wrapped in doubled braces.

    Returns:
        The repaired text, or None when the pass does not apply
    """
    if not (text.startswith("{{") and text.endswith("}}")):
        return None
    return text.replace("{{", "{").replace("}}", "}")
