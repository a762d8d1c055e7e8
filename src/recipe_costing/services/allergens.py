"""Allergen aggregation shared by recipe and menu views.

Statuses merge with the precedence ``has`` > ``may`` > ``no``. Only ``has``
and ``may`` ever appear in a summary; an allergen declared ``no`` everywhere
(or never declared) is simply absent.
"""

import json
from collections.abc import Iterable, Mapping

from recipe_costing.domain.ingredients import AllergenEntry, AllergenStatus
from recipe_costing.domain.recipes import RecipeIngredient

_RANK = {AllergenStatus.NO: 0, AllergenStatus.MAY: 1, AllergenStatus.HAS: 2}

_CELL_STATUSES = {
    "y": AllergenStatus.HAS,
    "yes": AllergenStatus.HAS,
    "n": AllergenStatus.NO,
    "no": AllergenStatus.NO,
    "may": AllergenStatus.MAY,
    "may contain": AllergenStatus.MAY,
    "p": AllergenStatus.MAY,
}


def status_from_cell(value: object) -> AllergenStatus | None:
    """Map an allergen table cell to a status, or None if unrecognized."""
    if value is None:
        return None
    return _CELL_STATUSES.get(str(value).strip().lower())


def parse_status(value: object) -> AllergenStatus | None:
    """Parse a stored status token."""
    if isinstance(value, AllergenStatus):
        return value
    if not isinstance(value, str):
        return None
    try:
        return AllergenStatus(value.strip().lower())
    except ValueError:
        return None


def parse_allergen_entries(raw: object) -> tuple[AllergenEntry, ...]:
    """Parse a serialized or structured allergen list.

    Accepts a JSON string, or an iterable of ``"name:status"`` tokens,
    ``{"allergy"|"name": ..., "status": ...}`` mappings, ``(name, status)``
    pairs and ``AllergenEntry`` objects. Malformed entries are dropped.
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return ()
        try:
            raw = json.loads(text)
        except json.JSONDecodeError:
            raw = [token for token in text.split(",") if token.strip()]
    if isinstance(raw, Mapping) or not isinstance(raw, Iterable):
        return ()
    entries: list[AllergenEntry] = []
    for item in raw:
        entry = _parse_entry(item)
        if entry is not None:
            entries.append(entry)
    return tuple(entries)


def to_tokens(entries: Iterable[AllergenEntry]) -> list[str]:
    """Serialize entries to ``"name:status"`` tokens."""
    return [f"{entry.name}:{entry.status.value}" for entry in entries]


def merge_status(
    current: AllergenStatus | None, incoming: AllergenStatus
) -> AllergenStatus:
    """Return the stronger of two statuses."""
    if current is None or _RANK[incoming] > _RANK[current]:
        return incoming
    return current


def summarize_entries(
    entry_lists: Iterable[Iterable[AllergenEntry]],
) -> dict[str, AllergenStatus]:
    """Reduce several allergen lists to a single summary."""
    merged: dict[str, AllergenStatus] = {}
    for entries in entry_lists:
        for entry in entries:
            merged[entry.name] = merge_status(merged.get(entry.name), entry.status)
    return _visible(merged)


def summarize(ingredients: Iterable[RecipeIngredient]) -> dict[str, AllergenStatus]:
    """Summarize the allergens of a set of recipe lines."""
    return summarize_entries(
        ingredient.snapshot.allergens for ingredient in ingredients
    )


def merge_summaries(
    summaries: Iterable[Mapping[str, AllergenStatus]],
) -> dict[str, AllergenStatus]:
    """Combine recipe summaries into one, e.g. for a whole menu."""
    return summarize_entries(
        [AllergenEntry(name=name, status=status) for name, status in summary.items()]
        for summary in summaries
    )


def _visible(merged: Mapping[str, AllergenStatus]) -> dict[str, AllergenStatus]:
    return {
        name: status
        for name, status in sorted(merged.items())
        if status is not AllergenStatus.NO
    }


def _parse_entry(item: object) -> AllergenEntry | None:
    if isinstance(item, AllergenEntry):
        return item
    name: object = None
    status: object = None
    if isinstance(item, str):
        name, sep, status = item.rpartition(":")
        if not sep:
            return None
    elif isinstance(item, Mapping):
        name = item.get("allergy") or item.get("name")
        status = item.get("status")
    elif isinstance(item, list | tuple) and len(item) == 2:  # noqa: PLR2004
        name, status = item
    if not isinstance(name, str) or not name.strip():
        return None
    parsed = parse_status(status)
    if parsed is None:
        return None
    return AllergenEntry(name=name.strip(), status=parsed)
