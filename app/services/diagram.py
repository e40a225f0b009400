from __future__ import annotations

import re

FLOW_DECLARATION = "graph TB"

_FENCE_RE = re.compile(r"```[ \t]*(?:[A-Za-z][\w-]*[ \t]*(?=\n|```))?\n?([\s\S]*?)(?:```|$)")


def extract_diagram_source(text: str) -> str:
    """Return bare Mermaid source, starting with a flow declaration."""
    text = (text or "").strip()
    match = _FENCE_RE.search(text)
    if match:
        text = match.group(1).strip()
    if not text:
        return ""
    if not (text.startswith("graph") or text.startswith("flowchart")):
        text = f"{FLOW_DECLARATION}\n{text}"
    return text


def wrap_diagram(text: str) -> str:
    source = extract_diagram_source(text)
    return f"```mermaid\n{source}\n```"
