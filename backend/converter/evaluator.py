from __future__ import annotations

import itertools
from collections import Counter
from typing import Sequence

from .formatting import RANK_ORDER
from .hand import GameVariant

HandRank = tuple[int, tuple[int, ...]]

HIGH_CARD = 0
ONE_PAIR = 1
TWO_PAIR = 2
THREE_OF_A_KIND = 3
STRAIGHT = 4
FLUSH = 5
FULL_HOUSE = 6
FOUR_OF_A_KIND = 7
STRAIGHT_FLUSH = 8

_RANK_NAMES = {
    2: "Deuce",
    3: "Three",
    4: "Four",
    5: "Five",
    6: "Six",
    7: "Seven",
    8: "Eight",
    9: "Nine",
    10: "Ten",
    11: "Jack",
    12: "Queen",
    13: "King",
    14: "Ace",
}


def _plural(value: int) -> str:
    name = _RANK_NAMES[value]
    return name + "es" if name == "Six" else name + "s"


class HandEvaluator:
    """Five-card hand ranking with PokerStars-style descriptions."""

    def best_rank(self, hole: Sequence[str], board: Sequence[str], variant: GameVariant) -> HandRank | None:
        if variant == GameVariant.HOLDEM:
            cards = list(hole) + list(board)
            if len(cards) < 5:
                return None
            return self._best_of(itertools.combinations(cards, 5))

        # Omaha plays exactly two hole cards and three board cards.
        if len(hole) < 2 or len(board) < 3:
            return None
        combos = (
            pair + trio
            for pair in itertools.combinations(hole, 2)
            for trio in itertools.combinations(board, 3)
        )
        return self._best_of(combos)

    def describe(self, rank: HandRank) -> str:
        category, values = rank
        if category == STRAIGHT_FLUSH:
            if values[0] == 14:
                return "a Royal Flush"
            return f"a straight flush, {self._straight_span(values[0])}"
        if category == FOUR_OF_A_KIND:
            return f"four of a kind, {_plural(values[0])}"
        if category == FULL_HOUSE:
            return f"a full house, {_plural(values[0])} full of {_plural(values[1])}"
        if category == FLUSH:
            return f"a flush, {_RANK_NAMES[values[0]]} high"
        if category == STRAIGHT:
            return f"a straight, {self._straight_span(values[0])}"
        if category == THREE_OF_A_KIND:
            return f"three of a kind, {_plural(values[0])}"
        if category == TWO_PAIR:
            return f"two pair, {_plural(values[0])} and {_plural(values[1])}"
        if category == ONE_PAIR:
            return f"a pair of {_plural(values[0])}"
        return f"high card {_RANK_NAMES[values[0]]}"

    def _straight_span(self, high: int) -> str:
        low = 14 if high == 5 else high - 4
        return f"{_RANK_NAMES[low]} to {_RANK_NAMES[high]}"

    def _best_of(self, combos) -> HandRank:
        best: HandRank | None = None
        for combo in combos:
            rank = self._rank_five(list(combo))
            if best is None or rank > best:
                best = rank
        if best is None:
            raise RuntimeError("Could not evaluate hand rank.")
        return best

    def _rank_five(self, cards: list[str]) -> HandRank:
        rank_values = sorted((RANK_ORDER.index(card[0]) + 2 for card in cards), reverse=True)
        suits = [card[1] for card in cards]
        counts = Counter(rank_values)

        is_flush = len(set(suits)) == 1
        straight_high = self._straight_high(rank_values)
        sorted_counts = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)

        if is_flush and straight_high is not None:
            return STRAIGHT_FLUSH, (straight_high,)

        if sorted_counts[0][1] == 4:
            return FOUR_OF_A_KIND, (sorted_counts[0][0], sorted_counts[1][0])

        if sorted_counts[0][1] == 3 and sorted_counts[1][1] == 2:
            return FULL_HOUSE, (sorted_counts[0][0], sorted_counts[1][0])

        if is_flush:
            return FLUSH, tuple(rank_values)

        if straight_high is not None:
            return STRAIGHT, (straight_high,)

        if sorted_counts[0][1] == 3:
            kickers = sorted((item[0] for item in sorted_counts[1:]), reverse=True)
            return THREE_OF_A_KIND, (sorted_counts[0][0], *kickers)

        if sorted_counts[0][1] == 2 and sorted_counts[1][1] == 2:
            pair_high = max(sorted_counts[0][0], sorted_counts[1][0])
            pair_low = min(sorted_counts[0][0], sorted_counts[1][0])
            return TWO_PAIR, (pair_high, pair_low, sorted_counts[2][0])

        if sorted_counts[0][1] == 2:
            kickers = sorted((item[0] for item in sorted_counts[1:]), reverse=True)
            return ONE_PAIR, (sorted_counts[0][0], *kickers)

        return HIGH_CARD, tuple(rank_values)

    def _straight_high(self, values: list[int]) -> int | None:
        unique = sorted(set(values), reverse=True)
        if len(unique) < 5:
            return None

        if unique[0] - unique[-1] == 4:
            return unique[0]

        if {14, 5, 4, 3, 2}.issubset(set(unique)):
            return 5

        return None
