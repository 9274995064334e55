"""
cms-feed — Field projection and output shapes.
"""

from __future__ import annotations

from typing import Any, Collection, Optional

from .config import SHAPE_NESTED
from .models import CMSItem


def project_item(item: CMSItem, allowed: Optional[Collection[str]]) -> CMSItem:
    """
    Keep only the fields whose key is in *allowed*.

    The id and timestamps always survive. No allow-list (None or empty)
    returns the item unchanged.
    """
    if not allowed:
        return item

    allowed_keys = set(allowed)
    return CMSItem(
        id=item.id,
        fields=[f for f in item.fields if f.key in allowed_keys],
        created_at=item.created_at,
        updated_at=item.updated_at or None,
    )


def nested_item(item: CMSItem) -> dict[str, Any]:
    """CMS-style shape: {id, fields: [...], createdAt, updatedAt?}."""
    out: dict[str, Any] = {
        "id": item.id,
        "fields": [f.to_dict() for f in item.fields],
        "createdAt": item.created_at,
    }
    if item.updated_at:
        out["updatedAt"] = item.updated_at
    return out


def flatten_item(item: CMSItem) -> dict[str, Any]:
    """Flat shape: {id, <field key>: <value>, ...}."""
    out: dict[str, Any] = {"id": item.id}
    for f in item.fields:
        if f.key == "id":
            continue
        out[f.key] = f.value
    return out


def shape_item(item: CMSItem, shape: str) -> dict[str, Any]:
    if shape == SHAPE_NESTED:
        return nested_item(item)
    return flatten_item(item)
