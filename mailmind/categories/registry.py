"""
Per-user category configuration layered over the default table.

Resolution: each default row is overlaid field by field with the user's
UserCategoryConfig (if any), the user's CustomCategory rows are appended, and
the result is sorted by group declaration order, then display order.

Concurrency: every mutation is a read-modify-write of a single
(user_id, category_id) record performed under that key's lock. Writes to
different keys never contend. Two concurrent writes to the same field of the
same key are applied in lock-acquisition order, so the last writer wins;
writes to different fields of the same key are merged and both survive.
Custom category creation locks on (user_id, group) so concurrent creates in
one group receive distinct display orders.
"""

from __future__ import annotations

import threading
import uuid

from mailmind.categories.defaults import (
    AVAILABLE_COLORS,
    AVAILABLE_ICONS,
    DEFAULT_CATEGORIES,
    DEFAULTS_BY_ID,
    GROUP_ORDER,
    CategoryGroup,
    CategoryMetadata,
)
from mailmind.categories.errors import CategoryNotFound, InvalidCategoryInput, SystemCategoryProtected
from mailmind.categories.store import (
    CategoryRecord,
    CategoryStore,
    CustomCategory,
    InMemoryCategoryStore,
    UserCategoryConfig,
)
from mailmind.observability.logging import get_logger
from mailmind.observability.telemetry import counter, log_event

logger = get_logger(__name__)

SHORT_LABEL_LENGTH = 15
MAX_LABEL_LENGTH = 50


def _short_label(label: str) -> str:
    return label[:SHORT_LABEL_LENGTH]


def _overlay(default: CategoryMetadata, config: UserCategoryConfig | None) -> CategoryMetadata:
    if config is None:
        return default
    updates: dict[str, object] = {}
    if config.custom_label is not None:
        updates["label"] = config.custom_label
        updates["short_label"] = _short_label(config.custom_label)
    if config.custom_color is not None:
        updates["color"] = config.custom_color
    if config.display_order is not None:
        updates["order"] = config.display_order
    if config.is_hidden is not None:
        updates["is_hidden"] = config.is_hidden
    return default.model_copy(update=updates)


def _from_custom(custom: CustomCategory) -> CategoryMetadata:
    return CategoryMetadata(
        id=custom.id,
        label=custom.label,
        short_label=_short_label(custom.label),
        group=custom.group,
        color=custom.color,
        icon=custom.icon,
        order=custom.order,
        is_default=False,
        is_system_category=False,
        is_hidden=custom.is_hidden,
    )


def _sort_key(row: CategoryMetadata) -> tuple[int, int]:
    return (GROUP_ORDER[row.group], row.order)


def _clean_label(label: str) -> str:
    cleaned = (label or "").strip()
    if not cleaned:
        raise InvalidCategoryInput("label must not be empty")
    if len(cleaned) > MAX_LABEL_LENGTH:
        raise InvalidCategoryInput(f"label longer than {MAX_LABEL_LENGTH} characters")
    return cleaned


def _check_color(color: str) -> str:
    if color not in AVAILABLE_COLORS:
        raise InvalidCategoryInput(f"unknown color {color!r}")
    return color


def _check_icon(icon: str) -> str:
    if icon not in AVAILABLE_ICONS:
        raise InvalidCategoryInput(f"unknown icon {icon!r}")
    return icon


def _check_order(order: int) -> int:
    if order < 0:
        raise InvalidCategoryInput("display order must be >= 0")
    return order


class CategoryRegistry:
    """Resolves and mutates a user's category list on top of DEFAULT_CATEGORIES."""

    def __init__(self, store: CategoryStore | None = None):
        self.store: CategoryStore = store if store is not None else InMemoryCategoryStore()
        self._locks: dict[tuple[str, str], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_categories(self, user_id: str) -> list[CategoryMetadata]:
        """Every category for the user, hidden ones included, in display order."""
        records = dict(self.store.items(user_id))
        rows = []
        for default in DEFAULT_CATEGORIES:
            record = records.get(default.id)
            rows.append(_overlay(default, record if isinstance(record, UserCategoryConfig) else None))
        for record in records.values():
            if isinstance(record, CustomCategory):
                rows.append(_from_custom(record))
        return sorted(rows, key=_sort_key)

    def visible_categories(self, user_id: str) -> list[CategoryMetadata]:
        return [row for row in self.resolve_categories(user_id) if not row.is_hidden]

    def resolve_categories_by_group(
        self, user_id: str, include_hidden: bool = False
    ) -> dict[CategoryGroup, list[CategoryMetadata]]:
        """Categories bucketed by group; every group is present, possibly empty."""
        rows = self.resolve_categories(user_id) if include_hidden else self.visible_categories(user_id)
        grouped: dict[CategoryGroup, list[CategoryMetadata]] = {group: [] for group in CategoryGroup}
        for row in rows:
            grouped[row.group].append(row)
        return grouped

    def get_category(self, user_id: str, category_id: str) -> CategoryMetadata:
        default = DEFAULTS_BY_ID.get(category_id)
        record = self.store.get(user_id, category_id)
        if default is not None:
            return _overlay(default, record if isinstance(record, UserCategoryConfig) else None)
        if isinstance(record, CustomCategory):
            return _from_custom(record)
        raise CategoryNotFound(category_id)

    @staticmethod
    def available_colors() -> list[str]:
        return list(AVAILABLE_COLORS)

    @staticmethod
    def available_icons() -> list[str]:
        return list(AVAILABLE_ICONS)

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def rename(self, user_id: str, category_id: str, label: str) -> CategoryMetadata:
        return self.update_config(user_id, category_id, label=label)

    def recolor(self, user_id: str, category_id: str, color: str) -> CategoryMetadata:
        return self.update_config(user_id, category_id, color=color)

    def hide(self, user_id: str, category_id: str, hidden: bool = True) -> CategoryMetadata:
        return self.update_config(user_id, category_id, is_hidden=hidden)

    def reorder(self, user_id: str, ordered_ids: list[str]) -> list[CategoryMetadata]:
        """
        Set display_order = position for each id in `ordered_ids`.

        All ids are validated before anything is written. Each key is then
        updated under its own lock; there is no cross-key transaction.
        """
        if len(set(ordered_ids)) != len(ordered_ids):
            raise InvalidCategoryInput("duplicate ids in reorder request")
        for category_id in ordered_ids:
            self._require_known(user_id, category_id)

        for index, category_id in enumerate(ordered_ids):
            self._apply(user_id, category_id, display_order=index)

        counter("categories.reorder")
        return self.resolve_categories(user_id)

    def update_config(
        self,
        user_id: str,
        category_id: str,
        *,
        label: str | None = None,
        color: str | None = None,
        display_order: int | None = None,
        is_hidden: bool | None = None,
    ) -> CategoryMetadata:
        """Apply any subset of label/color/order/hidden to one category."""
        fields: dict[str, object] = {}
        if label is not None:
            fields["label"] = _clean_label(label)
        if color is not None:
            fields["color"] = _check_color(color)
        if display_order is not None:
            fields["display_order"] = _check_order(display_order)
        if is_hidden is not None:
            fields["is_hidden"] = is_hidden

        self._require_known(user_id, category_id)
        if is_hidden and self._is_system(category_id):
            raise SystemCategoryProtected(category_id, "hidden")

        if fields:
            self._apply(user_id, category_id, **fields)
            for name in fields:
                counter(f"categories.update.{name}")
        return self.get_category(user_id, category_id)

    def create_custom_category(
        self,
        user_id: str,
        label: str,
        group: CategoryGroup | str = CategoryGroup.OTHER,
        color: str = "slate",
        icon: str = "Tag",
    ) -> CategoryMetadata:
        """Create a user category, placed after the last category of its group."""
        cleaned = _clean_label(label)
        try:
            group = CategoryGroup(group)
        except ValueError as e:
            raise InvalidCategoryInput(f"unknown group {group!r}") from e
        _check_color(color)
        _check_icon(icon)

        category_id = f"custom-{user_id}-{uuid.uuid4().hex[:12]}"
        # Creates in one group share a lock so each gets a distinct order
        with self._lock_for(user_id, f"group:{group.value}"):
            in_group = [row.order for row in self.resolve_categories(user_id) if row.group is group]
            custom = CustomCategory(
                id=category_id,
                user_id=user_id,
                label=cleaned,
                group=group,
                color=color,
                icon=icon,
                order=max(in_group, default=0) + 1,
            )
            self.store.put(user_id, category_id, custom)

        counter("categories.custom.created")
        log_event("categories.custom.created", group=group.value)
        return _from_custom(custom)

    def delete_category(self, user_id: str, category_id: str) -> bool:
        """
        Delete a category.

        Returns True when a custom category row was removed, False when a
        default category was hidden instead (emails keep their category).

        Raises:
            SystemCategoryProtected: for unclassified / doubtful
            CategoryNotFound: unknown id
        """
        if self._is_system(category_id):
            counter("categories.delete.protected")
            raise SystemCategoryProtected(category_id, "deleted")

        if category_id in DEFAULTS_BY_ID:
            self._apply(user_id, category_id, is_hidden=True)
            counter("categories.delete.hidden")
            return False

        with self._lock_for(user_id, category_id):
            if not isinstance(self.store.get(user_id, category_id), CustomCategory):
                raise CategoryNotFound(category_id)
            self.store.delete(user_id, category_id)

        counter("categories.delete.removed")
        log_event("categories.custom.deleted")
        return True

    def reset(self, user_id: str) -> int:
        """Drop every override for the user. Custom categories are kept."""
        removed = 0
        for category_id, record in self.store.items(user_id):
            if isinstance(record, UserCategoryConfig):
                with self._lock_for(user_id, category_id):
                    if self.store.delete(user_id, category_id):
                        removed += 1
        log_event("categories.reset", removed=removed)
        return removed

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_for(self, user_id: str, category_id: str) -> threading.Lock:
        key = (user_id, category_id)
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @staticmethod
    def _is_system(category_id: str) -> bool:
        default = DEFAULTS_BY_ID.get(category_id)
        return default is not None and default.is_system_category

    def _require_known(self, user_id: str, category_id: str) -> None:
        if category_id in DEFAULTS_BY_ID:
            return
        if not isinstance(self.store.get(user_id, category_id), CustomCategory):
            raise CategoryNotFound(category_id)

    def _apply(self, user_id: str, category_id: str, **fields: object) -> None:
        """Read-modify-write one record under its key lock."""
        with self._lock_for(user_id, category_id):
            current = self.store.get(user_id, category_id)
            record: CategoryRecord
            if category_id in DEFAULTS_BY_ID:
                base = current if isinstance(current, UserCategoryConfig) else UserCategoryConfig(
                    user_id=user_id, category_id=category_id
                )
                record = base.model_copy(update=_config_fields(fields))
            elif isinstance(current, CustomCategory):
                record = current.model_copy(update=_custom_fields(fields))
            else:
                raise CategoryNotFound(category_id)
            self.store.put(user_id, category_id, record)
        logger.debug("Updated category %s for user: %s", category_id, sorted(fields))


def _config_fields(fields: dict[str, object]) -> dict[str, object]:
    mapping = {"label": "custom_label", "color": "custom_color"}
    return {mapping.get(name, name): value for name, value in fields.items()}


def _custom_fields(fields: dict[str, object]) -> dict[str, object]:
    mapping = {"display_order": "order"}
    return {mapping.get(name, name): value for name, value in fields.items()}
