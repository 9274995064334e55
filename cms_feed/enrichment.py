"""
cms-feed — Item enrichment.

Attaches schema display names to item fields and swaps asset ids for asset
URLs. Items and fields keep their source order; inputs are never mutated.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from .models import ASSET_TYPE, CMSAssetsResponse, CMSField, CMSItem, CMSSchemaField


def index_schema(schema_fields: Iterable[CMSSchemaField]) -> dict[str, CMSSchemaField]:
    """Key → schema field. The first definition of a duplicated key wins."""
    index: dict[str, CMSSchemaField] = {}
    for sf in schema_fields:
        index.setdefault(sf.key, sf)
    return index


def resolve_asset_value(value: Any, asset_urls: Mapping[str, str]) -> Any:
    """Replace an asset id (or each id in a list) with its URL when known."""
    if isinstance(value, str):
        return asset_urls.get(value, value)
    if isinstance(value, list):
        return [asset_urls.get(v, v) if isinstance(v, str) else v for v in value]
    return value


def enrich_field(
    field: CMSField,
    schema_field: Optional[CMSSchemaField],
    asset_urls: Mapping[str, str],
) -> CMSField:
    field_type = schema_field.type if schema_field and schema_field.type else field.type
    value = field.value
    if field_type == ASSET_TYPE:
        value = resolve_asset_value(value, asset_urls)

    return CMSField(
        id=field.id,
        key=field.key,
        type=field.type,
        value=value,
        name=schema_field.name if schema_field else None,
    )


def enrich_items(
    items: Iterable[CMSItem],
    schema_fields: Iterable[CMSSchemaField],
    assets: CMSAssetsResponse | None,
) -> list[CMSItem]:
    """
    Return new items whose fields carry schema names and resolved asset URLs.

    Unresolvable asset ids are kept as-is, never dropped or nulled.
    """
    schema = index_schema(schema_fields)
    asset_urls = assets.url_map() if assets is not None else {}

    return [
        CMSItem(
            id=item.id,
            fields=[enrich_field(f, schema.get(f.key), asset_urls) for f in item.fields],
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
        for item in items
    ]
