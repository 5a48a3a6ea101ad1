"""Canonical event names.

Turns a table name and a raw change type into a dotted, human-readable
event name such as ``lead.updated``. Pure string functions, no I/O.
"""

from __future__ import annotations

_PAST_TENSE: dict[str, str] = {
    "create": "created",
    "created": "created",
    "insert": "created",
    "update": "updated",
    "updated": "updated",
    "modify": "updated",
    "delete": "deleted",
    "deleted": "deleted",
    "remove": "deleted",
}


def to_past_tense(event_type: str) -> str:
    """Normalize a change verb; unknown verbs pass through lower-cased."""
    verb = event_type.lower()
    return _PAST_TENSE.get(verb, verb)


def singularize(noun: str) -> str:
    """Best-effort singular form of a table name.

    Not grammatical: "classes" becomes "classe" since only the trailing
    "s" is dropped. Existing subscribers
    match on these names, so the rules must stay as they are.
    """
    word = noun.lower()
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("s"):
        return word[:-1]
    return word


def build_event_name(table: str, event_type: str) -> str:
    """Build the canonical event name for a table change.

    Example:
        >>> build_event_name("leads", "UPDATE")
        'lead.updated'
    """
    return f"{singularize(table)}.{to_past_tense(event_type)}"


def resolve_event_name(table: str, event_type: str, event: str | None = None) -> str:
    """Return the explicit ``event`` when given, else the canonical name."""
    if event:
        return event
    return build_event_name(table, event_type)


def event_name_variants(name: str) -> list[str]:
    """Names a subscription for ``name`` may have been registered under.

    Subscribers register either the plural table form or the singular
    one (``tasks.created`` / ``task.created``); both are matched.
    """
    normalized = name.lower()
    noun, sep, verb = normalized.partition(".")
    variants = [normalized]
    if sep and noun.endswith("s"):
        variants.append(f"{noun[:-1]}.{verb}")
    return variants
