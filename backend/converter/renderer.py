from __future__ import annotations

from decimal import Decimal
from typing import Callable

from .formatting import format_cards, format_money, format_timestamp
from .hand import (
    POST_KINDS,
    ActionKind,
    BettingStructure,
    GameVariant,
    HandRecord,
    Seat,
    Street,
)
from .positions import PositionMap
from .timeline import DerivedTimeline, PlayerResult, TimelineEntry

VARIANT_LABELS = {
    GameVariant.HOLDEM: "Hold'em",
    GameVariant.OMAHA: "Omaha",
    GameVariant.OMAHA_HI_LO: "Omaha Hi/Lo",
}

STRUCTURE_LABELS = {
    BettingStructure.NO_LIMIT: "No Limit",
    BettingStructure.POT_LIMIT: "Pot Limit",
    BettingStructure.LIMIT: "Limit",
}

STREET_TITLES = {
    Street.FLOP: "Flop",
    Street.TURN: "Turn",
    Street.RIVER: "River",
}


class TextRenderer:
    """Project a record and its derived timeline onto PokerStars hand-history text."""

    def __init__(
        self,
        record: HandRecord,
        timeline: DerivedTimeline,
        positions: PositionMap,
        show_all_hole_cards: bool = False,
    ) -> None:
        self.record = record
        self.timeline = timeline
        self.positions = positions
        self.show_all_hole_cards = show_all_hole_cards
        self.names = {seat.player_id: seat.name for seat in record.seats}
        self.pot_count = max(len(timeline.pots), len({award.pot_index for award in timeline.awards}))

    def render(self) -> str:
        lines = [self._header(), self._table_line()]
        lines.extend(self._seat_line(seat) for seat in self.record.seats)

        preflop = self.timeline.street(Street.PREFLOP)
        entries = preflop.entries if preflop else ()
        lines.extend(self._lines(entry for entry in entries if entry.kind in POST_KINDS))
        lines.append("*** HOLE CARDS ***")
        lines.extend(self._lines(entry for entry in entries if entry.kind == ActionKind.DEALT_CARDS))
        lines.extend(
            self._lines(
                entry for entry in entries if entry.kind not in POST_KINDS and entry.kind != ActionKind.DEALT_CARDS
            )
        )

        for street in self.timeline.streets:
            if street.street == Street.PREFLOP:
                continue
            lines.append(self._street_header(street.street))
            lines.extend(self._lines(street.entries))

        lines.extend(self._showdown_lines())
        lines.extend(self._summary())
        return "\n".join(lines)

    def money(self, amount: Decimal) -> str:
        return format_money(amount, self.record.currency)

    def name(self, player_id: str) -> str:
        return self.names.get(player_id, player_id)

    # -- header -----------------------------------------------------------

    def _header(self) -> str:
        game = f"{VARIANT_LABELS[self.record.variant]} {STRUCTURE_LABELS[self.record.structure]}"
        stakes = f"({self.money(self.record.small_blind)}/{self.money(self.record.big_blind)} {self.record.currency})"
        header = f"PokerStars Hand #{self.record.hand_id}: {game} {stakes}"
        if self.record.started_at is not None:
            header += f" - {format_timestamp(self.record.started_at)}"
        return header

    def _table_line(self) -> str:
        return (
            f"Table '{self.record.table_name}' {self.record.max_seats}-max "
            f"Seat #{self.record.button_seat} is the button"
        )

    def _seat_line(self, seat: Seat) -> str:
        return f"Seat {seat.number}: {seat.name} ({self.money(seat.starting_stack)} in chips)"

    def _street_header(self, street: Street) -> str:
        flop = self.record.board_for(Street.FLOP)
        turn = self.record.board_for(Street.TURN)
        river = self.record.board_for(Street.RIVER)
        if street == Street.FLOP:
            return f"*** FLOP *** [{format_cards(flop)}]"
        if street == Street.TURN:
            return f"*** TURN *** [{format_cards(flop)}] [{format_cards(turn)}]"
        return f"*** RIVER *** [{format_cards(flop + turn)}] [{format_cards(river)}]"

    # -- action lines -----------------------------------------------------

    def _lines(self, entries) -> list[str]:
        lines = []
        for entry in entries:
            line = LINE_FORMATTERS[entry.kind](self, entry)
            if line is not None:
                lines.append(line)
        return lines

    def _all_in(self, entry: TimelineEntry) -> str:
        return " and is all-in" if entry.all_in else ""

    def _dealt(self, entry: TimelineEntry) -> str | None:
        hero = self.record.hero_player_id
        if not entry.cards:
            return None
        if not self.show_all_hole_cards and hero is not None and entry.player_id != hero:
            return None
        return f"Dealt to {self.name(entry.player_id)} [{format_cards(entry.cards)}]"

    def _post_ante(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)}: posts the ante {self.money(entry.amount)}{self._all_in(entry)}"

    def _post_small_blind(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)}: posts small blind {self.money(entry.amount)}{self._all_in(entry)}"

    def _post_big_blind(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)}: posts big blind {self.money(entry.amount)}{self._all_in(entry)}"

    def _post_straddle(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)}: posts straddle {self.money(entry.amount)}{self._all_in(entry)}"

    def _post_dead(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)}: posts dead blind {self.money(entry.amount)}{self._all_in(entry)}"

    def _fold(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)}: folds"

    def _check(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)}: checks"

    def _call(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)}: calls {self.money(entry.amount)}{self._all_in(entry)}"

    def _bet(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)}: bets {self.money(entry.amount)}{self._all_in(entry)}"

    def _raise(self, entry: TimelineEntry) -> str:
        return (
            f"{self.name(entry.player_id)}: raises {self.money(entry.raise_by)} "
            f"to {self.money(entry.total)}{self._all_in(entry)}"
        )

    def _uncalled(self, entry: TimelineEntry) -> str:
        return f"Uncalled bet ({self.money(entry.amount)}) returned to {self.name(entry.player_id)}"

    def _collect(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)} collected {self.money(entry.amount)} from {self._pot_name(entry.pot_index or 0)}"

    def _show(self, entry: TimelineEntry) -> str:
        line = f"{self.name(entry.player_id)}: shows"
        if entry.cards:
            line += f" [{format_cards(entry.cards)}]"
        if entry.description:
            line += f" ({entry.description})"
        return line

    def _muck(self, entry: TimelineEntry) -> str:
        return f"{self.name(entry.player_id)}: mucks hand"

    def _pot_name(self, index: int) -> str:
        if self.pot_count <= 1:
            return "pot"
        if index == 0:
            return "main pot"
        if self.pot_count == 2:
            return "side pot"
        return f"side pot-{index}"

    # -- showdown and summary ----------------------------------------------

    def _showdown_lines(self) -> list[str]:
        if self.timeline.went_to_showdown:
            return ["*** SHOW DOWN ***", *self._lines(self.timeline.reveals), *self._lines(self.timeline.collections)]

        lines = self._lines(self.timeline.reveals)
        lines.extend(self._lines(self.timeline.collections))
        shown = {entry.player_id for entry in self.timeline.reveals if entry.kind == ActionKind.SHOW_CARDS}
        for entry in self.timeline.collections:
            if entry.player_id not in shown:
                lines.append(f"{self.name(entry.player_id)}: doesn't show hand")
                shown.add(entry.player_id)
        return lines

    def _pot_breakdown(self) -> str:
        pots = self.timeline.pots
        if len(pots) <= 1:
            return ""
        parts = [f"Main pot {self.money(pots[0].amount)}."]
        for pot in pots[1:]:
            label = "Side pot" if len(pots) == 2 else f"Side pot-{pot.index}"
            parts.append(f"{label} {self.money(pot.amount)}.")
        return " " + " ".join(parts)

    def _summary(self) -> list[str]:
        lines = [
            "*** SUMMARY ***",
            f"Total pot {self.money(self.timeline.total_pot)}{self._pot_breakdown()} | Rake {self.money(self.timeline.rake)}",
        ]
        if self.timeline.board:
            lines.append(f"Board [{format_cards(self.timeline.board)}]")

        acted = {entry.player_id for entry in self.timeline.entries()}
        for seat in self.record.seats:
            result = self.timeline.results.get(seat.player_id)
            if result is None or seat.player_id not in acted:
                continue
            lines.append(f"Seat {seat.number}: {seat.name}{self._seat_tags(seat.number)} {self._outcome(result)}")
        return lines

    def _seat_tags(self, seat_number: int) -> str:
        tags = ""
        if self.positions.is_button(seat_number):
            tags += " (button)"
        if self.positions.is_small_blind(seat_number):
            tags += " (small blind)"
        elif self.positions.is_big_blind(seat_number):
            tags += " (big blind)"
        return tags

    def _outcome(self, result: PlayerResult) -> str:
        if result.folded_on == Street.PREFLOP:
            return "folded before Flop" if result.put_in_before_flop else "folded before Flop (didn't bet)"
        if result.folded_on is not None:
            return f"folded on the {STREET_TITLES[result.folded_on]}"

        if result.shown_cards:
            shown = f"showed [{format_cards(result.shown_cards)}] and "
            shown += f"won ({self.money(result.won)})" if result.won > 0 else "lost"
            if result.description:
                shown += f" with {result.description}"
            return shown
        if result.won > 0:
            return f"collected ({self.money(result.won)})"
        if result.mucked_cards:
            return f"mucked [{format_cards(result.mucked_cards)}]"
        return "mucked"


LINE_FORMATTERS: dict[ActionKind, Callable[[TextRenderer, TimelineEntry], str | None]] = {
    ActionKind.DEALT_CARDS: TextRenderer._dealt,
    ActionKind.POST_ANTE: TextRenderer._post_ante,
    ActionKind.POST_SMALL_BLIND: TextRenderer._post_small_blind,
    ActionKind.POST_BIG_BLIND: TextRenderer._post_big_blind,
    ActionKind.POST_STRADDLE: TextRenderer._post_straddle,
    ActionKind.POST_DEAD: TextRenderer._post_dead,
    ActionKind.FOLD: TextRenderer._fold,
    ActionKind.CHECK: TextRenderer._check,
    ActionKind.CALL: TextRenderer._call,
    ActionKind.BET: TextRenderer._bet,
    ActionKind.RAISE: TextRenderer._raise,
    ActionKind.UNCALLED_BET_RETURN: TextRenderer._uncalled,
    ActionKind.COLLECT_POT: TextRenderer._collect,
    ActionKind.SHOW_CARDS: TextRenderer._show,
    ActionKind.MUCK_CARDS: TextRenderer._muck,
}


def render(
    record: HandRecord,
    timeline: DerivedTimeline,
    positions: PositionMap,
    show_all_hole_cards: bool = False,
) -> str:
    return TextRenderer(record, timeline, positions, show_all_hole_cards=show_all_hole_cards).render()
