"""Per-user category endpoints.

- GET    /api/users/{user_id}/categories
- GET    /api/users/{user_id}/categories/grouped
- POST   /api/users/{user_id}/categories
- PUT    /api/users/{user_id}/categories/order
- PATCH  /api/users/{user_id}/categories/{category_id}
- DELETE /api/users/{user_id}/categories/{category_id}
- POST   /api/users/{user_id}/categories/reset
- GET    /api/categories/options

Registry errors propagate; app.py maps them to 404 / 409 / 422.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, HTTPException

from mailmind.api.models import CategoryCreate, CategoryOrder, CategoryUpdate
from mailmind.categories.defaults import GROUP_METADATA, CategoryMetadata
from mailmind.observability.telemetry import log_event

if TYPE_CHECKING:
    from mailmind.categories.registry import CategoryRegistry

router = APIRouter(prefix="/api", tags=["categories"])

_registry: CategoryRegistry | None = None


def set_category_registry(registry: CategoryRegistry) -> None:
    """Inject the category registry dependency."""
    global _registry
    _registry = registry


def _require_registry() -> CategoryRegistry:
    if _registry is None:
        raise HTTPException(status_code=500, detail="Category registry not initialized")
    return _registry


@router.get("/users/{user_id}/categories", response_model=list[CategoryMetadata])
def list_categories(user_id: str, include_hidden: bool = True) -> list[CategoryMetadata]:
    registry = _require_registry()
    if include_hidden:
        return registry.resolve_categories(user_id)
    return registry.visible_categories(user_id)


@router.get("/users/{user_id}/categories/grouped")
def list_categories_by_group(user_id: str, include_hidden: bool = False) -> list[dict[str, Any]]:
    grouped = _require_registry().resolve_categories_by_group(user_id, include_hidden=include_hidden)
    return [
        {
            "group": GROUP_METADATA[group].model_dump(mode="json"),
            "categories": [row.model_dump(mode="json") for row in rows],
        }
        for group, rows in grouped.items()
    ]


@router.post("/users/{user_id}/categories", response_model=CategoryMetadata, status_code=201)
def create_category(user_id: str, category: CategoryCreate) -> CategoryMetadata:
    created = _require_registry().create_custom_category(
        user_id,
        label=category.label,
        group=category.group,
        color=category.color,
        icon=category.icon,
    )
    log_event("api.categories.created", group=created.group.value)
    return created


@router.put("/users/{user_id}/categories/order", response_model=list[CategoryMetadata])
def reorder_categories(user_id: str, order: CategoryOrder) -> list[CategoryMetadata]:
    return _require_registry().reorder(user_id, order.ordered_ids)


@router.patch("/users/{user_id}/categories/{category_id}", response_model=CategoryMetadata)
def update_category(user_id: str, category_id: str, update: CategoryUpdate) -> CategoryMetadata:
    return _require_registry().update_config(
        user_id,
        category_id,
        label=update.label,
        color=update.color,
        display_order=update.display_order,
        is_hidden=update.is_hidden,
    )


@router.delete("/users/{user_id}/categories/{category_id}")
def delete_category(user_id: str, category_id: str) -> dict[str, Any]:
    removed = _require_registry().delete_category(user_id, category_id)
    return {"category_id": category_id, "removed": removed, "hidden": not removed}


@router.post("/users/{user_id}/categories/reset")
def reset_categories(user_id: str) -> dict[str, Any]:
    return {"removed_overrides": _require_registry().reset(user_id)}


@router.get("/categories/options")
def category_options() -> dict[str, Any]:
    registry = _require_registry()
    return {
        "colors": registry.available_colors(),
        "icons": registry.available_icons(),
        "groups": [meta.model_dump(mode="json") for meta in GROUP_METADATA.values()],
    }
