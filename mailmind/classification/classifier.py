"""
EmailClassifier - weighted signal scoring over the 21 categories.

Algorithm (per email):
1. Every category starts at 0.
2. Each signal from extract_signals() adds its weight to its category.
3. The strictly highest score wins; ties go to the category declared first
   in Category. A winning score of 0 means "unclassified".
4. base = policy.base_for_score(score); final = round((base + sample) / 2)
   where sample comes from the injected UncertaintySource (None => base).
5. final < doubt threshold => category "doubtful", group "other".

classify() is total: any valid Email yields a result, nothing is raised.
"""

from __future__ import annotations

import concurrent.futures
from collections.abc import Sequence

from mailmind.categories.defaults import CATEGORY_GROUPS, Category, CategoryGroup
from mailmind.classification.keywords import REASONING_PHRASES
from mailmind.classification.signals import Signal, SignalType, extract_signals
from mailmind.classification.uncertainty import UncertaintySource, uncertainty_from_config
from mailmind.config import LLM_MAX_WORKERS
from mailmind.observability.confidence import ClassificationPolicy
from mailmind.observability.logging import get_logger
from mailmind.observability.telemetry import counter, time_block
from mailmind.storage.models import ClassificationResult, Email
from mailmind.utils.redaction import redact_subject

logger = get_logger(__name__)

_SIGNAL_TYPE_NAMES: dict[SignalType, str] = {
    SignalType.FILENAME: "attachment name",
    SignalType.SUBJECT_KEYWORD: "subject keywords",
    SignalType.BODY_KEYWORD: "body keywords",
    SignalType.ATTACHMENT_KIND: "document attachment",
    SignalType.SENDER_DOMAIN: "sender",
}

INSUFFICIENT_SIGNAL = "Insufficient signal: no keyword, attachment or sender evidence"
MANUAL_REVIEW_HINT = "Uncertain classification, manual review recommended"


def score_signals(signals: Sequence[Signal]) -> dict[Category, int]:
    """Sum signal weights per category; every category is present."""
    scores = {category: 0 for category in Category}
    for signal in signals:
        if signal.category is not None:
            scores[signal.category] += signal.weight
    return scores


def pick_winner(scores: dict[Category, int]) -> tuple[Category, int]:
    """Strictly highest score wins, earliest declared category on ties; 0 => unclassified."""
    best, best_score = Category.UNCLASSIFIED, 0
    for category in Category:
        if scores.get(category, 0) > best_score:
            best, best_score = category, scores[category]
    return best, best_score


def combine_confidence(base: int, sample: int | None) -> int:
    """Average base and sample, rounding halves up, clamped to [0, 100]."""
    value = base if sample is None else (base + sample + 1) // 2
    return max(0, min(100, value))


def top_signal_types(signals: Sequence[Signal], category: Category, limit: int = 2) -> list[SignalType]:
    """Signal types contributing most weight to `category`, heaviest first."""
    weights: dict[SignalType, int] = {}
    for signal in signals:
        if signal.category is category:
            weights[signal.type] = weights.get(signal.type, 0) + signal.weight
    # sorted() is stable: equal weights keep first-seen order
    ranked = sorted(weights.items(), key=lambda item: item[1], reverse=True)
    return [signal_type for signal_type, _ in ranked[:limit]]


def build_reasoning(
    raw_category: Category, score: int, signals: Sequence[Signal], confidence: int, is_doubtful: bool
) -> str:
    if score == 0:
        parts = [INSUFFICIENT_SIGNAL]
    else:
        headline, _ = REASONING_PHRASES[raw_category]
        types = ", ".join(_SIGNAL_TYPE_NAMES[t] for t in top_signal_types(signals, raw_category))
        parts = [f"{headline} (based on {types})"]
        if is_doubtful:
            parts.append(f"Closest match: {raw_category.value}")

    if is_doubtful:
        parts.append(MANUAL_REVIEW_HINT)
    else:
        parts.append(f"Confidence: {confidence}%")
    return ". ".join(parts) + "."


def is_doubtful_confidence(confidence: int, policy: ClassificationPolicy | None = None) -> bool:
    return (policy or ClassificationPolicy()).is_doubtful(confidence)


def reclassify(result: ClassificationResult, category: Category | str) -> ClassificationResult:
    """Manual reclassification: the user's choice is final, confidence 100, never doubtful."""
    category = Category(category)
    counter("classification.manual")
    return ClassificationResult(
        email_id=result.email_id,
        category=category,
        group=CATEGORY_GROUPS[category],
        confidence=100,
        is_doubtful=False,
        reasoning="Manually classified",
        raw_category=result.raw_category,
        score=result.score,
        evidence=result.evidence,
        manually_classified=True,
    )


class EmailClassifier:
    """
    Classify emails into one of the 21 categories.

    Stateless between calls apart from the uncertainty source, so one
    instance can serve concurrent requests.
    """

    def __init__(
        self,
        policy: ClassificationPolicy | None = None,
        uncertainty: UncertaintySource | None = None,
        max_workers: int = LLM_MAX_WORKERS,
    ):
        self.policy = policy or ClassificationPolicy()
        self.uncertainty = uncertainty if uncertainty is not None else uncertainty_from_config()
        self.max_workers = max(1, max_workers)

    def classify(self, email: Email) -> ClassificationResult:
        with time_block("classification.classify.latency"):
            signals = extract_signals(email, self.policy)
            scores = score_signals(signals)
            raw_category, score = pick_winner(scores)

            base = self.policy.base_for_score(score)
            confidence = combine_confidence(base, self.uncertainty.sample(email.id))
            is_doubtful = self.policy.is_doubtful(confidence)

            category = Category.DOUBTFUL if is_doubtful else raw_category
            group = CategoryGroup.OTHER if is_doubtful else CATEGORY_GROUPS[raw_category]

            result = ClassificationResult(
                email_id=email.id,
                category=category,
                group=group,
                confidence=confidence,
                is_doubtful=is_doubtful,
                reasoning=build_reasoning(raw_category, score, signals, confidence, is_doubtful),
                raw_category=raw_category,
                score=score,
                evidence=tuple(s.description for s in signals if s.category is raw_category),
            )

        counter("classification.classified")
        counter(f"classification.category.{category.value}")
        if is_doubtful:
            counter("classification.doubtful")
        logger.debug(
            "Classified %s (%s): raw=%s score=%d confidence=%d final=%s",
            email.id,
            redact_subject(email.subject),
            raw_category.value,
            score,
            confidence,
            category.value,
        )
        return result

    def classify_batch(self, emails: Sequence[Email]) -> list[ClassificationResult]:
        """Classify in parallel; results come back in input order."""
        if not emails:
            return []
        if len(emails) == 1 or self.max_workers == 1:
            return [self.classify(email) for email in emails]

        results: list[tuple[int, ClassificationResult]] = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_idx = {executor.submit(self.classify, email): idx for idx, email in enumerate(emails)}
            for future in concurrent.futures.as_completed(future_to_idx):
                results.append((future_to_idx[future], future.result()))

        # Restore original order
        results.sort(key=lambda item: item[0])
        counter("classification.batch.count", len(results))
        return [result for _, result in results]
