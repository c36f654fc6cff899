"""Tests for the model-uncertainty sources."""

import random

import pytest

from mailmind.classification.uncertainty import (
    FixedUncertainty,
    HashedUncertainty,
    NoUncertainty,
    RandomUncertainty,
    UncertaintySource,
    uncertainty_from_config,
)


class TestRandomUncertainty:
    def test_seeded_runs_repeat(self):
        """Two sources with the same seed produce the same samples."""
        a = RandomUncertainty(seed=42)
        b = RandomUncertainty(seed=42)
        assert [a.sample("x") for _ in range(50)] == [b.sample("x") for _ in range(50)]

    def test_range(self):
        """Samples stay within 40-98."""
        source = RandomUncertainty(rng=random.Random(1))
        assert all(40 <= source.sample("x") <= 98 for _ in range(500))

    def test_zero_doubt_share(self):
        """With no doubt share every sample is in the high band."""
        source = RandomUncertainty(rng=random.Random(2), doubt_percentage=0)
        assert all(source.sample("x") >= 70 for _ in range(200))

    def test_full_doubt_share(self):
        """With a 100% doubt share every sample is in the low band."""
        source = RandomUncertainty(rng=random.Random(3), doubt_percentage=100)
        assert all(40 <= source.sample("x") <= 69 for _ in range(200))

    def test_invalid_share(self):
        with pytest.raises(ValueError):
            RandomUncertainty(doubt_percentage=120)


class TestDeterministicSources:
    def test_hashed_is_stable_per_email(self):
        """The same email id always gets the same sample."""
        source = HashedUncertainty()
        assert source.sample("email-7") == source.sample("email-7")
        assert HashedUncertainty().sample("email-7") == source.sample("email-7")

    def test_fixed(self):
        assert FixedUncertainty(55).sample("anything") == 55
        with pytest.raises(ValueError):
            FixedUncertainty(101)

    def test_none(self):
        assert NoUncertainty().sample("anything") is None

    def test_all_satisfy_protocol(self):
        for source in (RandomUncertainty(seed=1), HashedUncertainty(), FixedUncertainty(80), NoUncertainty()):
            assert isinstance(source, UncertaintySource)


class TestFromConfig:
    def test_named_modes(self):
        assert isinstance(uncertainty_from_config("random"), RandomUncertainty)
        assert isinstance(uncertainty_from_config("hashed"), HashedUncertainty)
        assert isinstance(uncertainty_from_config("none"), NoUncertainty)

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            uncertainty_from_config("gaussian")
