"""
Module: store
Purpose: Key-value storage seam for per-user category overrides.
Dependencies: pydantic

The registry only talks to the `CategoryStore` protocol, keyed by
(user_id, category_id). Two record shapes live in the store:

- UserCategoryConfig: a field-by-field override of a default category
- CustomCategory: a user-created category with no default row
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from mailmind.categories.defaults import CategoryGroup


class UserCategoryConfig(BaseModel):
    """Override of one default category for one user. None means "use default"."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    category_id: str
    display_order: int | None = None
    custom_label: str | None = None
    custom_color: str | None = None
    is_hidden: bool | None = None


class CustomCategory(BaseModel):
    """A user-created category."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    label: str
    group: CategoryGroup = CategoryGroup.OTHER
    color: str = "slate"
    icon: str = "Tag"
    order: int = 1
    is_hidden: bool = False


CategoryRecord = UserCategoryConfig | CustomCategory


@runtime_checkable
class CategoryStore(Protocol):
    """Storage interface for category override records."""

    def get(self, user_id: str, category_id: str) -> CategoryRecord | None: ...

    def put(self, user_id: str, category_id: str, record: CategoryRecord) -> None: ...

    def delete(self, user_id: str, category_id: str) -> bool: ...

    def items(self, user_id: str) -> list[tuple[str, CategoryRecord]]: ...


class InMemoryCategoryStore:
    """Dict-backed CategoryStore. Records are immutable so reads never alias writes."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, CategoryRecord]] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str, category_id: str) -> CategoryRecord | None:
        with self._lock:
            return self._records.get(user_id, {}).get(category_id)

    def put(self, user_id: str, category_id: str, record: CategoryRecord) -> None:
        with self._lock:
            self._records.setdefault(user_id, {})[category_id] = record

    def delete(self, user_id: str, category_id: str) -> bool:
        with self._lock:
            user_records = self._records.get(user_id)
            if not user_records or category_id not in user_records:
                return False
            del user_records[category_id]
            return True

    def items(self, user_id: str) -> list[tuple[str, CategoryRecord]]:
        with self._lock:
            return list(self._records.get(user_id, {}).items())
