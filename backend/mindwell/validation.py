"""
MindWell Backend — Request Body Validation
==========================================

What:  Explicit checks for every client-supplied body (required fields,
       types, mood enumeration, allowed keys).
How:   Each validator takes the decoded JSON body and returns the cleaned
       values, or raises ValidationError("Invalid data") naming the offending
       field in its context (logged server-side, not returned).
Who:   Called by route handlers before any store call, so a rejected request
       never creates or changes a record.
"""

from typing import Any, Dict, Optional, Tuple

from mindwell.exceptions import ValidationError
from mindwell.repositories.records import JOURNAL_MUTABLE_FIELDS, MOOD_LABELS

USERNAME_MAX_LENGTH = 150
TITLE_MAX_LENGTH = 200


def _require_object(body: Any) -> Dict[str, Any]:
    if not isinstance(body, dict):
        raise ValidationError(context={"reason": "body must be a JSON object"})
    return body


def _text(body: Dict[str, Any], field: str, max_length: Optional[int] = None) -> str:
    value = body.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field=field)
    if max_length is not None and len(value) > max_length:
        raise ValidationError(field=field, context={"max_length": max_length})
    return value


def _mood(body: Dict[str, Any], field: str = "mood") -> str:
    value = body.get(field)
    # Case-sensitive: "Happy" is not a label
    if not isinstance(value, str) or value not in MOOD_LABELS:
        raise ValidationError(field=field, context={"allowed": list(MOOD_LABELS)})
    return value


def validate_journal_create(body: Any) -> Dict[str, str]:
    """
    Body: {title, content, mood}. Any `userId` in the body is ignored; the
    owner always comes from the authenticated identity.
    """
    body = _require_object(body)
    return {
        "title": _text(body, "title", TITLE_MAX_LENGTH),
        "content": _text(body, "content"),
        "mood": _mood(body),
    }


def validate_journal_patch(body: Any) -> Dict[str, str]:
    """
    Body: a non-empty subset of {title, content, mood}.

    Keys outside that set (including `userId`, `id`, `createdAt`) are
    rejected rather than silently dropped.
    """
    body = _require_object(body)
    if not body:
        raise ValidationError(context={"reason": "no fields to update"})

    unknown = set(body) - JOURNAL_MUTABLE_FIELDS
    if unknown:
        raise ValidationError(context={"unknown_fields": sorted(unknown)})

    fields: Dict[str, str] = {}
    if "title" in body:
        fields["title"] = _text(body, "title", TITLE_MAX_LENGTH)
    if "content" in body:
        fields["content"] = _text(body, "content")
    if "mood" in body:
        fields["mood"] = _mood(body)
    return fields


def validate_mood_create(body: Any) -> Tuple[str, Optional[str]]:
    """Body: {mood, note?}. Returns (mood, note)."""
    body = _require_object(body)
    mood = _mood(body)
    note = body.get("note")
    if note is not None and not isinstance(note, str):
        raise ValidationError(field="note")
    return mood, note


def validate_registration(body: Any) -> Tuple[str, str, str]:
    """Body: {username, password, email}. Returns them in that order."""
    body = _require_object(body)
    username = _text(body, "username", USERNAME_MAX_LENGTH).strip()
    password = _text(body, "password")
    email = _text(body, "email").strip()
    if "@" not in email:
        raise ValidationError(field="email")
    return username, password, email


def validate_credentials(body: Any) -> Tuple[str, str]:
    """Body: {username, password}."""
    body = _require_object(body)
    return _text(body, "username").strip(), _text(body, "password")
