"""Category table (21 categories, 5 groups) and per-user override resolution."""

from mailmind.categories.defaults import (
    CATEGORY_GROUPS,
    DEFAULT_CATEGORIES,
    SYSTEM_CATEGORIES,
    Category,
    CategoryGroup,
    CategoryMetadata,
    get_category_group,
)
from mailmind.categories.errors import (
    CategoryNotFound,
    CategoryRegistryError,
    InvalidCategoryInput,
    SystemCategoryProtected,
)
from mailmind.categories.registry import CategoryRegistry
from mailmind.categories.store import CategoryStore, CustomCategory, InMemoryCategoryStore, UserCategoryConfig

__all__ = [
    "CATEGORY_GROUPS",
    "DEFAULT_CATEGORIES",
    "SYSTEM_CATEGORIES",
    "Category",
    "CategoryGroup",
    "CategoryMetadata",
    "CategoryNotFound",
    "CategoryRegistry",
    "CategoryRegistryError",
    "CategoryStore",
    "CustomCategory",
    "InMemoryCategoryStore",
    "InvalidCategoryInput",
    "SystemCategoryProtected",
    "UserCategoryConfig",
    "get_category_group",
]
