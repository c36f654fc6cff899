"""
Model-uncertainty sources for the confidence score.

The classifier mixes a deterministic base confidence with a sample from one
of these sources: final = round((base + sample) / 2). A source returning None
means "no uncertainty" and the base is used as is.

Sources:
- RandomUncertainty: reference behavior. Most samples fall in 70-98, a
  configurable share (15% by default) in 40-69, which is what pushes
  borderline emails into "doubtful".
- HashedUncertainty: same distribution, but a pure function of the email id,
  so reruns and parallel batches are reproducible.
- FixedUncertainty / NoUncertainty: for tests and deterministic deployments.
"""

from __future__ import annotations

import random
import threading
from typing import Protocol, runtime_checkable

from mailmind.observability.confidence import (
    UNCERTAINTY_DOUBT_PERCENTAGE,
    UNCERTAINTY_MODE,
    UNCERTAINTY_SEED,
)

LOW_BAND = (40, 69)
HIGH_BAND = (70, 98)


@runtime_checkable
class UncertaintySource(Protocol):
    def sample(self, email_id: str) -> int | None: ...


def _draw(rng: random.Random, doubt_percentage: int) -> int:
    if rng.random() < doubt_percentage / 100:
        return rng.randint(*LOW_BAND)
    return rng.randint(*HIGH_BAND)


class RandomUncertainty:
    """Draws from a shared RNG. Seed it to make a whole run reproducible."""

    def __init__(
        self,
        seed: int | None = None,
        rng: random.Random | None = None,
        doubt_percentage: int = UNCERTAINTY_DOUBT_PERCENTAGE,
    ):
        if not 0 <= doubt_percentage <= 100:
            raise ValueError("doubt_percentage must be within [0, 100]")
        self._rng = rng if rng is not None else random.Random(seed)
        self._lock = threading.Lock()
        self.doubt_percentage = doubt_percentage

    def sample(self, email_id: str) -> int:
        with self._lock:
            return _draw(self._rng, self.doubt_percentage)


class HashedUncertainty:
    """Deterministic per email: the same id always gets the same sample."""

    def __init__(self, salt: str = "mailmind", doubt_percentage: int = UNCERTAINTY_DOUBT_PERCENTAGE):
        if not 0 <= doubt_percentage <= 100:
            raise ValueError("doubt_percentage must be within [0, 100]")
        self.salt = salt
        self.doubt_percentage = doubt_percentage

    def sample(self, email_id: str) -> int:
        return _draw(random.Random(f"{self.salt}:{email_id}"), self.doubt_percentage)


class FixedUncertainty:
    def __init__(self, value: int):
        if not 0 <= value <= 100:
            raise ValueError("uncertainty sample must be within [0, 100]")
        self.value = value

    def sample(self, email_id: str) -> int:
        return self.value


class NoUncertainty:
    def sample(self, email_id: str) -> None:
        return None


def uncertainty_from_config(mode: str | None = None) -> UncertaintySource:
    """Build the source named in mailmind_policy.yaml (uncertainty.mode)."""
    mode = mode or UNCERTAINTY_MODE
    if mode == "random":
        return RandomUncertainty(seed=UNCERTAINTY_SEED)
    if mode == "hashed":
        return HashedUncertainty()
    if mode == "none":
        return NoUncertainty()
    raise ValueError(f"unknown uncertainty mode {mode!r}")
