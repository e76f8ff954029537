"""
Filter helpers

Converts plain metadata dictionaries into Qdrant filters.
"""

from typing import Any, Dict, Optional, Union

from qdrant_client.http import models

FilterLike = Union[models.Filter, Dict[str, Any]]


def build_metadata_filter(
    filters: Dict[str, Any], metadata_payload_key: str
) -> Optional[models.Filter]:
    """Build a ``must`` filter matching metadata fields by exact value.

    Keys are looked up inside the metadata payload, so ``{"source": "a"}``
    becomes a condition on ``<metadata_payload_key>.source``. List values
    match any of the given values.
    """
    conditions = []
    for key, value in filters.items():
        if isinstance(value, (list, tuple, set)):
            match = models.MatchAny(any=list(value))
        else:
            match = models.MatchValue(value=value)
        conditions.append(
            models.FieldCondition(key=f"{metadata_payload_key}.{key}", match=match)
        )

    if not conditions:
        return None
    return models.Filter(must=conditions)


def to_qdrant_filter(
    filter: Optional[FilterLike], metadata_payload_key: str
) -> Optional[models.Filter]:
    """Normalize a filter argument; Qdrant filters pass through unchanged."""
    if filter is None or isinstance(filter, models.Filter):
        return filter
    if isinstance(filter, dict):
        return build_metadata_filter(filter, metadata_payload_key)
    raise TypeError(
        f"Unsupported filter type: {type(filter).__name__}. "
        "Use qdrant_client.models.Filter or a dict of metadata values."
    )
