from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.models.schemas import PersonalizationFacts, RawProfile, is_absolute_url

TEXT_FIELDS = ("full_name", "title", "skills", "experience", "certifications")
URL_FIELDS = ("portfolio", "linkedin", "github")
# Fields that on their own make a profile worth using in a prompt
SIGNAL_FIELDS = ("skills", "experience", "title", "certifications")


def sanitize(raw: RawProfile | Mapping[str, Any] | None) -> PersonalizationFacts | None:
    """Reduce a stored profile to the facts that are safe to put in a prompt.

    Returns None when nothing useful is left, so callers only ever deal with
    one "no profile" branch.
    """
    if raw is None:
        return None
    if not isinstance(raw, RawProfile):
        raw = RawProfile.from_record(raw)

    values: dict[str, str] = {}
    for field in TEXT_FIELDS:
        text = _clean(getattr(raw, field))
        if text:
            values[field] = text

    for field in URL_FIELDS:
        url = _clean(getattr(raw, field))
        if url and is_absolute_url(url):
            values[field] = url

    has_signal = any(field in values for field in SIGNAL_FIELDS)
    has_link = any(field in values for field in URL_FIELDS)
    if not (has_signal or has_link):
        return None

    return PersonalizationFacts(**values)


def _clean(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()
