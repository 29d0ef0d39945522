"""
Hazard identifier normalization.

Catalog rows spell the same hazard several ways (``power_outage``,
``PowerOutage``, ``power-outage``). Every hazard reference is reduced to a
single comparison key when the row is validated.
"""

import json
import re
from typing import FrozenSet, Iterable, List, Union

_SEPARATORS = re.compile(r"[\s_\-]+")


def hazard_key(hazard_id: str) -> str:
    """Comparison key for a hazard id: lowercase, separators removed"""
    if not isinstance(hazard_id, str):
        raise ValueError(f"Hazard id must be a string, got {type(hazard_id).__name__}")
    key = _SEPARATORS.sub("", hazard_id).lower()
    if not key:
        raise ValueError(f"Hazard id {hazard_id!r} is empty after normalization")
    return key


def parse_id_list(value: Union[str, Iterable[str], None]) -> List[str]:
    """
    Accept a list of ids or a JSON-encoded list (how the admin store keeps them)

    Raises:
        ValueError: if the value is not a list of strings
    """
    if value is None:
        return []
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return []
        try:
            value = json.loads(stripped)
        except json.JSONDecodeError as e:
            raise ValueError(f"Unparseable id list {stripped[:60]!r}: {e}") from e
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ValueError(f"Expected a list of ids, got {type(value).__name__}")
    ids = list(value)
    for item in ids:
        if not isinstance(item, str):
            raise ValueError(f"Expected string ids, got {item!r}")
    return ids


def hazard_keys(value: Union[str, Iterable[str], None]) -> FrozenSet[str]:
    return frozenset(hazard_key(h) for h in parse_id_list(value))
