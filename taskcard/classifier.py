"""Rule-based task classifier.

Scores a task description against four keyword vocabularies, one per task
level, and picks the dominant level. A second vocabulary of complexity
markers sets the tone of the description (simple, medium, complex or
innovation), which nudges the level up or down. Confidence reflects how
clearly one level dominated.

Keywords match as whole words: a hit may not touch a Latin letter or digit
on either side. This applies the same way to CJK terms, so ``实现`` matches
inside ``实现用户登录`` while ``add`` does not match inside ``addendum``.
Complexity markers match as plain substrings.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Mapping, Optional, Pattern, Sequence, Tuple, TypeVar

from .models import Classification, ClassificationAnalysis, TaskLevel
from .vocabulary import (
    COMPLEXITY_MARKERS,
    DEFAULT_TONE,
    KEYWORD_REASON_TEMPLATE,
    LEVEL_KEYWORDS,
    LEVEL_NAMES,
    LEVEL_ORDER,
    LEVEL_RECOMMENDATIONS,
    TONE_ORDER,
    TONE_REASONS,
)

logger = logging.getLogger("taskcard.classifier")

K = TypeVar("K")

# Bonus when the chosen level is also the top scorer
TOP_PICK_BONUS = 0.2
# Penalty when the two best levels are closer than AMBIGUITY_GAP
AMBIGUITY_GAP = 0.2
AMBIGUITY_PENALTY = 0.15


def _keyword_pattern(keyword: str) -> Pattern[str]:
    return re.compile(r"(?<![a-z0-9])" + re.escape(keyword.lower()) + r"(?![a-z0-9])")


def _stable_argmax(keys: Sequence[K], values: Mapping[K, float]) -> K:
    """First key in ``keys`` holding the maximum value."""
    best = keys[0]
    for key in keys[1:]:
        if values[key] > values[best]:
            best = key
    return best


class TaskClassifier:
    """Suggest a task level for a free-text description.

    Instances only hold read-only tables and compiled patterns, so one
    classifier can be shared freely.
    """

    def __init__(
        self,
        keywords: Optional[Mapping[TaskLevel, Sequence[str]]] = None,
        complexity_markers: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        keywords = keywords if keywords is not None else LEVEL_KEYWORDS
        markers = complexity_markers if complexity_markers is not None else COMPLEXITY_MARKERS

        self._patterns: Dict[TaskLevel, Tuple[Tuple[str, Pattern[str]], ...]] = {
            level: tuple((keyword, _keyword_pattern(keyword)) for keyword in keywords.get(level, ()))
            for level in LEVEL_ORDER
        }
        self._markers: Dict[str, Tuple[str, ...]] = {
            tone: tuple(marker.lower() for marker in markers.get(tone, ()))
            for tone in TONE_ORDER
        }

    def classify(self, description: Optional[str]) -> Classification:
        """Classify ``description``; never raises for any text input."""
        return self.analyze(description).classification

    def analyze(self, description: Optional[str]) -> ClassificationAnalysis:
        """Classify ``description`` and keep the intermediate scores."""
        text = (description or "").lower()

        raw_scores, matched = self._count_keywords(text)
        scores = self._normalize(raw_scores)
        tone, tone_counts = self._assess_complexity(text)

        base_level = self._base_level(scores)
        level = self._adjust_for_tone(base_level, tone)
        confidence = self._calculate_confidence(scores, level)
        reasoning = self._generate_reasoning(scores, tone, level)

        logger.debug(
            "Classified description (%d chars): raw=%s tone=%s base=%d level=%d confidence=%.3f",
            len(text), raw_scores, tone, base_level, level, confidence,
        )

        return ClassificationAnalysis(
            raw_scores={int(k): v for k, v in raw_scores.items()},
            scores={int(k): v for k, v in scores.items()},
            matched_keywords={int(k): v for k, v in matched.items()},
            tone=tone,
            tone_counts=tone_counts,
            base_level=base_level,
            classification=Classification(
                level=level,
                confidence=confidence,
                reasoning=tuple(reasoning),
            ),
        )

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def _count_keywords(self, text: str) -> Tuple[Dict[TaskLevel, int], Dict[TaskLevel, List[str]]]:
        raw_scores: Dict[TaskLevel, int] = {}
        matched: Dict[TaskLevel, List[str]] = {}
        for level in LEVEL_ORDER:
            total = 0
            hits: List[str] = []
            for keyword, pattern in self._patterns[level]:
                count = len(pattern.findall(text))
                if count:
                    total += count
                    hits.append(keyword)
            raw_scores[level] = total
            matched[level] = hits
        return raw_scores, matched

    @staticmethod
    def _normalize(raw_scores: Mapping[TaskLevel, int]) -> Dict[TaskLevel, float]:
        max_score = max(raw_scores.values())
        if max_score == 0:
            return {level: 0.0 for level in LEVEL_ORDER}
        return {level: raw_scores[level] / max_score for level in LEVEL_ORDER}

    def _assess_complexity(self, text: str) -> Tuple[str, Dict[str, int]]:
        counts = {
            tone: sum(1 for marker in self._markers[tone] if marker in text)
            for tone in TONE_ORDER
        }
        if max(counts.values()) == 0:
            return DEFAULT_TONE, counts
        return _stable_argmax(TONE_ORDER, counts), counts

    # ------------------------------------------------------------------
    # Level selection
    # ------------------------------------------------------------------

    @staticmethod
    def _base_level(scores: Mapping[TaskLevel, float]) -> TaskLevel:
        return _stable_argmax(LEVEL_ORDER, scores)

    @staticmethod
    def _adjust_for_tone(base_level: TaskLevel, tone: str) -> TaskLevel:
        if tone == "innovation":
            return TaskLevel.INNOVATION
        if tone == "simple":
            return TaskLevel(max(TaskLevel.STANDARDIZED, base_level - 1))
        if tone == "complex":
            return TaskLevel(min(TaskLevel.INNOVATION, base_level + 1))
        return base_level

    @staticmethod
    def _calculate_confidence(scores: Mapping[TaskLevel, float], level: TaskLevel) -> float:
        ordered = sorted(scores.values(), reverse=True)
        max_score = ordered[0]
        level_score = scores[level]

        confidence = level_score
        if level_score == max_score and max_score > 0:
            confidence += TOP_PICK_BONUS
        if ordered[0] - ordered[1] < AMBIGUITY_GAP:
            confidence -= AMBIGUITY_PENALTY

        # Clamp once; the adjustments above may overshoot in either direction
        return min(1.0, max(0.0, confidence))

    # ------------------------------------------------------------------
    # Reasoning
    # ------------------------------------------------------------------

    @staticmethod
    def _generate_reasoning(scores: Mapping[TaskLevel, float], tone: str, level: TaskLevel) -> List[str]:
        reasoning: List[str] = []

        if any(scores[lvl] > 0 for lvl in LEVEL_ORDER):
            top_level = _stable_argmax(LEVEL_ORDER, scores)
            reasoning.append(KEYWORD_REASON_TEMPLATE.format(level_name=LEVEL_NAMES[top_level]))

        reasoning.append(TONE_REASONS.get(tone, TONE_REASONS[DEFAULT_TONE]))
        reasoning.append(LEVEL_RECOMMENDATIONS[level])
        return reasoning


_default_classifier: Optional[TaskClassifier] = None


def get_classifier() -> TaskClassifier:
    """Return the shared classifier built from the default vocabularies."""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = TaskClassifier()
    return _default_classifier


def classify_task(description: Optional[str]) -> Classification:
    """Classify ``description`` with the default vocabularies."""
    return get_classifier().classify(description)
