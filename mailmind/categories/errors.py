"""Errors raised by CategoryRegistry mutators. Resolution itself never raises."""

from __future__ import annotations


class CategoryRegistryError(Exception):
    """Base class for registry errors."""


class SystemCategoryProtected(CategoryRegistryError):
    """Attempt to delete or hide `unclassified` / `doubtful`."""

    def __init__(self, category_id: str, action: str):
        self.category_id = category_id
        self.action = action
        super().__init__(f"system category {category_id!r} cannot be {action}")


class CategoryNotFound(CategoryRegistryError):
    """Mutation referencing a category id the user does not have."""

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"unknown category {category_id!r}")


class InvalidCategoryInput(CategoryRegistryError, ValueError):
    """Empty label, unknown color/icon/group, negative order."""
