"""Category suggestions for imported transactions.

Two strategies run in order: the description (or the bank's own category
label) is compared against category names, then against the descriptions of
transactions the user already categorised.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from rapidfuzz.distance import Levenshtein

from fintrack.domain.entities import Category, Transaction, TransactionType

logger = logging.getLogger(__name__)

NAME_MATCH_THRESHOLD = 0.6
CONTAINMENT_BONUS = 0.5
HISTORY_MIN_CONTAINED_LENGTH = 5
HISTORY_WORD_SIMILARITY = 0.7

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    text = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def similarity(a: str, b: str) -> float:
    """Levenshtein similarity in [0, 1]."""
    return Levenshtein.normalized_similarity(a, b)


def words_similar(a: str, b: str) -> bool:
    """True when two words are equal, nested, or within the allowed edit distance.

    Words of up to five characters may differ by 20%, longer ones by 35%.
    """
    if a == b or a in b or b in a:
        return True
    max_distance = 0.2 if max(len(a), len(b)) <= 5 else 0.35
    return Levenshtein.normalized_distance(a, b) <= max_distance


def word_similarity(a: str, b: str) -> float:
    """Similarity of two normalized descriptions, word by word.

    Words of two characters or fewer are ignored. Each word of ``a`` takes
    its best unused partner in ``b``: 1.0 when equal, 0.85 when one contains
    the other and both have at least four characters, 0.7 when merely
    similar. The total is divided by the average word count.
    """
    words_a = [w for w in a.split(" ") if len(w) > 2]
    words_b = [w for w in b.split(" ") if len(w) > 2]
    if not words_a or not words_b:
        return 0.0

    used: set[int] = set()
    total = 0.0
    for word in words_a:
        best_score = 0.0
        best_index = -1
        for index, other in enumerate(words_b):
            if index in used:
                continue
            if word == other:
                score = 1.0
            elif min(len(word), len(other)) >= 4 and (word in other or other in word):
                score = 0.85
            elif words_similar(word, other):
                score = 0.7
            else:
                score = 0.0
            if score > best_score:
                best_score, best_index = score, index
        if best_index >= 0:
            used.add(best_index)
            total += best_score

    return total / ((len(words_a) + len(words_b)) / 2)


@dataclass
class MatchContext:
    """Data the strategies match against, loaded once per import."""

    categories: list[Category]
    transactions: list[Transaction] = field(default_factory=list)


class MatchStrategy(ABC):
    """A way of proposing a category for a description."""

    @abstractmethod
    def match(
        self, text: str, transaction_type: TransactionType, context: MatchContext
    ) -> Optional[int]:
        """Return a category ID or None."""
        pass


class NameMatchStrategy(MatchStrategy):
    """Compares the text with category names of the same type."""

    def match(self, text, transaction_type, context):
        needle = normalize(text)
        if not needle:
            return None

        best_id = None
        best_score = 0.0
        for category in context.categories:
            if category.category_type != transaction_type:
                continue
            name = normalize(category.name)
            if not name:
                continue
            if name == needle:
                return category.id

            if name in needle or needle in name:
                shorter, longer = sorted((name, needle), key=len)
                score = len(shorter) / len(longer) + CONTAINMENT_BONUS
            else:
                score = similarity(needle, name)

            if score > best_score:
                best_id, best_score = category.id, score

        if best_score >= NAME_MATCH_THRESHOLD:
            return best_id
        return None


class HistoryMatchStrategy(MatchStrategy):
    """Reuses the most common category of similar past transactions."""

    def match(self, text, transaction_type, context):
        needle = normalize(text)
        if not needle:
            return None

        votes: Counter[int] = Counter()
        for txn in context.transactions:
            if txn.type != transaction_type or txn.category_id is None or not txn.description:
                continue
            if self._is_similar(needle, normalize(txn.description)):
                votes[txn.category_id] += 1

        if not votes:
            return None
        return votes.most_common(1)[0][0]

    @staticmethod
    def _is_similar(needle: str, other: str) -> bool:
        if not other:
            return False
        if needle == other:
            return True
        shorter = min(len(needle), len(other))
        if shorter >= HISTORY_MIN_CONTAINED_LENGTH and (needle in other or other in needle):
            return True
        return word_similarity(needle, other) > HISTORY_WORD_SIMILARITY


class CategoryMatcher:
    """Runs the matching strategies in order and returns the first hit."""

    def __init__(self, strategies: Optional[list[MatchStrategy]] = None):
        self.name_strategy = NameMatchStrategy()
        self.strategies = strategies or [self.name_strategy, HistoryMatchStrategy()]

    def suggest(
        self,
        description: str,
        transaction_type: TransactionType,
        context: MatchContext,
        label: Optional[str] = None,
    ) -> Optional[int]:
        """Suggest a category for a transaction.

        Args:
            description: Transaction description
            transaction_type: Only categories of this type are considered
            context: Categories and categorised history of the user
            label: Category name assigned by the source bank, tried first
                against category names

        Returns:
            Category ID or None
        """
        if label:
            category_id = self.name_strategy.match(label, transaction_type, context)
            if category_id is not None:
                logger.debug("Matched label %r to category %d", label, category_id)
                return category_id

        for strategy in self.strategies:
            category_id = strategy.match(description, transaction_type, context)
            if category_id is not None:
                logger.debug(
                    "%s matched %r to category %d",
                    type(strategy).__name__,
                    description,
                    category_id,
                )
                return category_id
        return None
