"""Tests for the built-in category table."""

import pytest

from mailmind.categories.defaults import (
    CATEGORY_GROUPS,
    DEFAULT_CATEGORIES,
    GROUP_METADATA,
    SYSTEM_CATEGORIES,
    Category,
    CategoryGroup,
    get_category_group,
    require_exhaustive,
)


class TestCategoryTable:
    def test_twenty_one_categories_in_five_groups(self):
        """Every category id appears once and maps to one of five groups."""
        assert len(Category) == 21
        assert len(CategoryGroup) == 5
        assert len(DEFAULT_CATEGORIES) == 21
        assert {row.id for row in DEFAULT_CATEGORIES} == {c.value for c in Category}

    def test_group_sizes(self):
        """Recruitment and business have six categories each, other has two."""
        sizes = {group: 0 for group in CategoryGroup}
        for group in CATEGORY_GROUPS.values():
            sizes[group] += 1
        assert sizes == {
            CategoryGroup.RECRUITMENT: 6,
            CategoryGroup.BUSINESS: 6,
            CategoryGroup.COMMUNICATION: 4,
            CategoryGroup.UNDESIRABLE: 3,
            CategoryGroup.OTHER: 2,
        }

    def test_order_is_position_within_group(self):
        """Default order restarts at 1 in every group."""
        by_group: dict[CategoryGroup, list[int]] = {}
        for row in DEFAULT_CATEGORIES:
            by_group.setdefault(row.group, []).append(row.order)
        for orders in by_group.values():
            assert orders == list(range(1, len(orders) + 1))

    def test_only_unclassified_and_doubtful_are_system(self):
        """System flag is set exactly on the two fallback categories."""
        assert SYSTEM_CATEGORIES == {Category.UNCLASSIFIED, Category.DOUBTFUL}
        flagged = {row.id for row in DEFAULT_CATEGORIES if row.is_system_category}
        assert flagged == {"unclassified", "doubtful"}

    def test_defaults_are_visible(self):
        """No default category starts hidden."""
        assert not any(row.is_hidden for row in DEFAULT_CATEGORIES)

    def test_group_metadata_covers_every_group(self):
        """Group display metadata exists for every group, in declaration order."""
        assert list(GROUP_METADATA) == list(CategoryGroup)
        assert [meta.order for meta in GROUP_METADATA.values()] == [1, 2, 3, 4, 5]


class TestGroupLookup:
    def test_group_of_builtin_category(self):
        """Lookup accepts enum members and raw ids."""
        assert get_category_group(Category.CV_JOB_OFFER) is CategoryGroup.RECRUITMENT
        assert get_category_group("invoice_payment") is CategoryGroup.BUSINESS
        assert get_category_group("doubtful") is CategoryGroup.OTHER

    def test_unknown_id_raises(self):
        """Unknown ids are rejected rather than defaulted."""
        with pytest.raises(ValueError):
            get_category_group("not-a-category")


class TestExhaustiveCheck:
    def test_missing_member_raises(self):
        """A per-category table missing a member fails loudly."""
        table = {c: 1 for c in Category if c is not Category.PARTNER}
        with pytest.raises(RuntimeError, match="partner"):
            require_exhaustive(table, "table")

    def test_complete_table_passes(self):
        """A complete table is accepted."""
        require_exhaustive({c: 1 for c in Category}, "table")
