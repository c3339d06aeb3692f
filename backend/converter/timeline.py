"""Replay an OHH action list into a street-partitioned timeline with derived facts.

The replay keeps a chip ledger per player (stack behind, chips committed on the
current street, chips contributed to the hand).  From it the builder derives what
the text dialect needs but OHH does not store: bet-versus-raise wording, the
amount owed before each action, all-in flags, uncalled bets returned at street
end, and the split of the pot into main and side pots.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal
from typing import Iterator, Mapping

from .config import DEFAULT_EPSILON, RaiseAmounts
from .errors import InconsistentAction
from .evaluator import HandEvaluator
from .formatting import smallest_unit
from .hand import (
    BETTING_KINDS,
    BETTING_STREETS,
    REVEAL_KINDS,
    Action,
    ActionKind,
    HandRecord,
    PotAward,
    Street,
)
from .positions import clockwise_from_button

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class TimelineEntry:
    sequence: int
    street: Street
    player_id: str
    kind: ActionKind
    amount: Decimal | None = None
    total: Decimal | None = None
    raise_by: Decimal | None = None
    to_call: Decimal = ZERO
    pot: Decimal = ZERO
    stack: Decimal | None = None
    all_in: bool = False
    cards: tuple[str, ...] = ()
    description: str | None = None
    pot_index: int | None = None
    synthetic: bool = False


@dataclass(frozen=True)
class StreetTimeline:
    street: Street
    board: tuple[str, ...]
    entries: tuple[TimelineEntry, ...]

    @property
    def uncalled_bet(self) -> TimelineEntry | None:
        for entry in self.entries:
            if entry.kind == ActionKind.UNCALLED_BET_RETURN:
                return entry
        return None


@dataclass(frozen=True)
class SidePot:
    index: int
    amount: Decimal
    eligible: tuple[str, ...]


@dataclass(frozen=True)
class PlayerResult:
    player_id: str
    contributed: Decimal
    won: Decimal
    final_stack: Decimal
    folded_on: Street | None
    put_in_before_flop: bool
    all_in: bool
    shown_cards: tuple[str, ...] = ()
    mucked: bool = False
    mucked_cards: tuple[str, ...] = ()
    description: str | None = None


@dataclass(frozen=True)
class DerivedTimeline:
    streets: tuple[StreetTimeline, ...]
    reveals: tuple[TimelineEntry, ...]
    collections: tuple[TimelineEntry, ...]
    pots: tuple[SidePot, ...]
    awards: tuple[PotAward, ...]
    results: Mapping[str, PlayerResult]
    total_pot: Decimal
    rake: Decimal
    board: tuple[str, ...]
    went_to_showdown: bool
    awards_computed: bool
    warnings: tuple[InconsistentAction, ...] = ()

    def street(self, street: Street) -> StreetTimeline | None:
        for item in self.streets:
            if item.street == street:
                return item
        return None

    def entries(self) -> Iterator[TimelineEntry]:
        for item in self.streets:
            yield from item.entries

    @property
    def uncalled_returns(self) -> list[TimelineEntry]:
        return [entry for entry in self.entries() if entry.kind == ActionKind.UNCALLED_BET_RETURN]

    @property
    def all_in_players(self) -> frozenset[str]:
        return frozenset(pid for pid, result in self.results.items() if result.all_in)

    @property
    def contributions(self) -> dict[str, Decimal]:
        return {pid: result.contributed for pid, result in self.results.items()}


@dataclass
class PlayerLedger:
    player_id: str
    seat: int
    stack: Decimal
    committed: Decimal = ZERO
    contributed: Decimal = ZERO
    antes: Decimal = ZERO
    folded_on: Street | None = None
    all_in: bool = False

    @property
    def active(self) -> bool:
        return self.folded_on is None


@dataclass
class _Reveal:
    action: Action
    description: str | None = None


@dataclass
class _State:
    street: Street | None = None
    pot: Decimal = ZERO
    last_sequence: int = 0
    entries: dict[Street, list[TimelineEntry]] = field(default_factory=lambda: defaultdict(list))


class TimelineBuilder:
    def __init__(
        self,
        record: HandRecord,
        epsilon: Decimal = DEFAULT_EPSILON,
        raise_amounts: RaiseAmounts = "to",
        evaluator: HandEvaluator | None = None,
    ) -> None:
        self.record = record
        self.epsilon = epsilon
        self.raise_amounts = raise_amounts
        self.evaluator = evaluator or HandEvaluator()
        self.unit = smallest_unit(record.currency)
        self.players: dict[str, PlayerLedger] = {
            seat.player_id: PlayerLedger(player_id=seat.player_id, seat=seat.number, stack=seat.starting_stack)
            for seat in record.seats
        }
        self.order = [
            self._player_at(seat)
            for seat in clockwise_from_button(record.button_seat, [seat.number for seat in record.seats])
        ]
        self.state = _State()
        self.reveals: list[_Reveal] = []
        self.seen: set[str] = set()
        self.warnings: list[InconsistentAction] = []

    def build(self) -> DerivedTimeline:
        actions = sorted(self.record.actions, key=lambda item: item.sequence)
        self._check_order(actions)

        for action in actions:
            if action.kind in REVEAL_KINDS:
                self.reveals.append(_Reveal(action))
                continue
            if action.street == Street.SHOWDOWN:
                raise InconsistentAction(
                    f"Hand {self.record.hand_id}: {action.kind.value} by {action.player_id} at showdown."
                )
            if action.street != self.state.street:
                self._close_street()
                self.state.street = action.street
            self._apply(action)
        self._close_street()

        live = [ledger for ledger in self.order if ledger.active and ledger.player_id in self.seen]
        went_to_showdown = len(live) >= 2
        board = self.record.board
        for reveal in self.reveals:
            if reveal.action.kind == ActionKind.SHOW_CARDS and reveal.action.cards:
                rank = self.evaluator.best_rank(reveal.action.cards, board, self.record.variant)
                if rank is not None:
                    reveal.description = self.evaluator.describe(rank)

        pots = self._side_pots(live)
        total_pot = sum((ledger.contributed for ledger in self.players.values()), ZERO)
        if self.record.pot_awards:
            awards = self._check_supplied_awards(total_pot, pots)
            computed = False
        else:
            awards = self._compute_awards(pots, went_to_showdown)
            computed = True

        return DerivedTimeline(
            streets=self._street_timelines(),
            reveals=tuple(self._reveal_entries(went_to_showdown)),
            collections=tuple(self._collections(awards)),
            pots=tuple(pots),
            awards=tuple(awards),
            results=self._results(awards),
            total_pot=total_pot,
            rake=self.record.rake,
            board=board,
            went_to_showdown=went_to_showdown,
            awards_computed=computed,
            warnings=tuple(self.warnings),
        )

    # -- replay -----------------------------------------------------------

    def _player_at(self, seat_number: int) -> PlayerLedger:
        for ledger in self.players.values():
            if ledger.seat == seat_number:
                return ledger
        raise KeyError(seat_number)

    def _ledger(self, player_id: str) -> PlayerLedger:
        ledger = self.players.get(player_id)
        if ledger is None:
            raise InconsistentAction(f"Hand {self.record.hand_id}: player {player_id} is not seated.")
        return ledger

    def _check_order(self, actions: list[Action]) -> None:
        latest = Street.PREFLOP
        for action in actions:
            self._ledger(action.player_id)
            self.seen.add(action.player_id)
            if action.street.order < latest.order:
                raise InconsistentAction(
                    f"Hand {self.record.hand_id}: {action.street.value} action #{action.sequence} "
                    f"comes after {latest.value} actions."
                )
            latest = action.street

    def _highest_commitment(self) -> Decimal:
        return max((ledger.committed for ledger in self.players.values() if ledger.active), default=ZERO)

    def _apply(self, action: Action) -> None:
        ledger = self._ledger(action.player_id)
        kind = action.kind
        street = action.street

        if kind in BETTING_KINDS:
            if not ledger.active:
                raise InconsistentAction(
                    f"Hand {self.record.hand_id}: {ledger.player_id} acts after folding (action #{action.sequence})."
                )
            if ledger.all_in:
                raise InconsistentAction(
                    f"Hand {self.record.hand_id}: {ledger.player_id} acts after going all-in (action #{action.sequence})."
                )

        to_call = max(ZERO, self._highest_commitment() - ledger.committed)
        stack_before = ledger.stack
        paid: Decimal | None = None
        total: Decimal | None = None
        raise_by: Decimal | None = None

        if kind == ActionKind.DEALT_CARDS:
            pass

        elif kind == ActionKind.POST_ANTE:
            paid = self._commit(ledger, action.amount, street_bet=False)
            ledger.antes += paid

        elif kind in (ActionKind.POST_SMALL_BLIND, ActionKind.POST_BIG_BLIND, ActionKind.POST_STRADDLE):
            paid = self._commit(ledger, action.amount)

        elif kind == ActionKind.POST_DEAD:
            paid = self._commit(ledger, action.amount, street_bet=False)

        elif kind == ActionKind.FOLD:
            ledger.folded_on = street

        elif kind == ActionKind.CHECK:
            if to_call > self.epsilon:
                logger.debug("Hand %s: %s checks facing %s", self.record.hand_id, ledger.player_id, to_call)

        elif kind == ActionKind.CALL:
            paid = self._commit(ledger, action.amount)

        elif kind in (ActionKind.BET, ActionKind.RAISE):
            previous_bet = self._highest_commitment()
            added = self._wager_increment(ledger, action)
            paid = self._commit(ledger, added)
            total = ledger.committed
            if total <= previous_bet:
                # All-in for no more than the current bet is a call.
                kind = ActionKind.CALL
                total = None
            elif previous_bet > 0:
                kind = ActionKind.RAISE
                raise_by = total - previous_bet
            else:
                kind = ActionKind.BET

        else:
            raise InconsistentAction(f"Hand {self.record.hand_id}: unexpected {kind.value} in the action list.")

        all_in = stack_before > 0 and ledger.stack == 0 and paid is not None
        if paid is not None and action.flagged_all_in != all_in:
            self._warn(
                f"Hand {self.record.hand_id}: action #{action.sequence} by {ledger.player_id} is "
                f"{'' if action.flagged_all_in else 'not '}flagged all-in but has {ledger.stack} behind."
            )

        self._append(
            TimelineEntry(
                sequence=action.sequence,
                street=street,
                player_id=ledger.player_id,
                kind=kind,
                amount=paid,
                total=total,
                raise_by=raise_by,
                to_call=to_call,
                pot=self.state.pot,
                stack=ledger.stack,
                all_in=all_in,
                cards=action.cards,
            )
        )

    def _wager_increment(self, ledger: PlayerLedger, action: Action) -> Decimal:
        amount = action.amount if action.amount is not None else ZERO
        if self.raise_amounts == "increment":
            added = amount
        else:
            added = amount - ledger.committed
        if added <= 0:
            raise InconsistentAction(
                f"Hand {self.record.hand_id}: {action.kind.value} to {amount} by {ledger.player_id} "
                f"does not exceed the {ledger.committed} already committed."
            )
        return added

    def _commit(self, ledger: PlayerLedger, amount: Decimal | None, street_bet: bool = True) -> Decimal:
        amount = amount if amount is not None else ZERO
        if amount > ledger.stack + self.epsilon:
            raise InconsistentAction(
                f"Hand {self.record.hand_id}: {ledger.player_id} puts in {amount} with only {ledger.stack} behind."
            )
        paid = min(amount, ledger.stack)
        ledger.stack -= paid
        ledger.contributed += paid
        if street_bet:
            ledger.committed += paid
        self.state.pot += paid
        if ledger.stack == 0 and paid > 0:
            ledger.all_in = True
        return paid

    def _append(self, entry: TimelineEntry) -> None:
        self.state.entries[entry.street].append(entry)
        self.state.last_sequence = entry.sequence

    def _close_street(self) -> None:
        street = self.state.street
        if street is None:
            return

        ranked = sorted(self.players.values(), key=lambda ledger: ledger.committed, reverse=True)
        top = ranked[0]
        matched = ranked[1].committed if len(ranked) > 1 else ZERO
        excess = top.committed - matched
        if excess > 0:
            top.committed -= excess
            top.contributed -= excess
            top.stack += excess
            self.state.pot -= excess
            self._append(
                TimelineEntry(
                    sequence=self.state.last_sequence,
                    street=street,
                    player_id=top.player_id,
                    kind=ActionKind.UNCALLED_BET_RETURN,
                    amount=excess,
                    pot=self.state.pot,
                    stack=top.stack,
                    synthetic=True,
                )
            )

        for ledger in self.players.values():
            ledger.committed = ZERO

    def _street_timelines(self) -> tuple[StreetTimeline, ...]:
        timelines = []
        for street in BETTING_STREETS:
            entries = self.state.entries.get(street, [])
            board = self.record.board_for(street)
            if street == Street.PREFLOP or entries or board:
                timelines.append(StreetTimeline(street=street, board=board, entries=tuple(entries)))
        return tuple(timelines)

    def _reveal_entries(self, went_to_showdown: bool) -> Iterator[TimelineEntry]:
        for reveal in self.reveals:
            action = reveal.action
            yield TimelineEntry(
                sequence=action.sequence,
                street=Street.SHOWDOWN if went_to_showdown else action.street,
                player_id=action.player_id,
                kind=action.kind,
                cards=action.cards,
                description=reveal.description,
                pot=self.state.pot,
            )

    # -- pots -------------------------------------------------------------

    def _side_pots(self, live: list[PlayerLedger]) -> list[SidePot]:
        contributions = [ledger.contributed for ledger in self.order if ledger.contributed > 0]
        if not contributions:
            return []

        levels = sorted({ledger.contributed for ledger in live if ledger.all_in} | {max(contributions)})
        pots: list[SidePot] = []
        previous = ZERO
        for level in levels:
            if level <= previous:
                continue
            amount = sum((min(c, level) - min(c, previous) for c in contributions), ZERO)
            # Live players who are not all-in matched every bet, whatever their dead money.
            eligible = tuple(
                ledger.player_id for ledger in live if ledger.contributed >= level or not ledger.all_in
            )
            previous = level
            if amount <= 0:
                continue
            if pots and (not eligible or eligible == pots[-1].eligible):
                last = pots[-1]
                pots[-1] = SidePot(index=last.index, amount=last.amount + amount, eligible=last.eligible)
                continue
            pots.append(SidePot(index=len(pots), amount=amount, eligible=eligible))
        return pots

    def _pot_winners(self, eligible: tuple[str, ...], went_to_showdown: bool) -> tuple[str, ...]:
        if len(eligible) <= 1 or not went_to_showdown:
            return eligible

        mucked = {
            reveal.action.player_id for reveal in self.reveals if reveal.action.kind == ActionKind.MUCK_CARDS
        }
        # A mucked hand gives up its claim on the pot.
        eligible = tuple(player_id for player_id in eligible if player_id not in mucked) or eligible

        shown = {
            reveal.action.player_id: reveal.action.cards
            for reveal in self.reveals
            if reveal.action.kind == ActionKind.SHOW_CARDS and reveal.action.cards
        }
        ranks = {}
        for player_id in eligible:
            if player_id not in shown:
                return eligible
            rank = self.evaluator.best_rank(shown[player_id], self.record.board, self.record.variant)
            if rank is None:
                return eligible
            ranks[player_id] = rank
        best = max(ranks.values())
        return tuple(player_id for player_id in eligible if ranks[player_id] == best)

    def _split(self, amount: Decimal, winners: tuple[str, ...]) -> list[tuple[str, Decimal]]:
        share = (amount / len(winners)).quantize(self.unit, rounding=ROUND_DOWN)
        odd = amount - share * len(winners)
        # Odd chips go to the first winner clockwise from the button.
        return [(player_id, share + odd if index == 0 else share) for index, player_id in enumerate(winners)]

    def _compute_awards(self, pots: list[SidePot], went_to_showdown: bool) -> list[PotAward]:
        awards: list[PotAward] = []
        rake_left = self.record.rake
        for pot in pots:
            if not pot.eligible:
                continue
            taken = min(rake_left, pot.amount)
            rake_left -= taken
            winners = self._pot_winners(pot.eligible, went_to_showdown)
            for player_id, amount in self._split(pot.amount - taken, winners):
                awards.append(PotAward(player_id=player_id, amount=amount, pot_index=pot.index))
        return awards

    def _check_supplied_awards(self, total_pot: Decimal, pots: list[SidePot]) -> list[PotAward]:
        awards = list(self.record.pot_awards)
        for award in awards:
            self._ledger(award.player_id)

        supplied = sum((award.amount for award in awards), ZERO) + self.record.rake
        if abs(supplied - total_pot) > self.epsilon:
            self._warn(
                f"Hand {self.record.hand_id}: pot awards plus rake total {supplied} "
                f"but the replayed pot is {total_pot}."
            )

        eligible = {player_id for pot in pots for player_id in pot.eligible}
        for award in awards:
            if award.amount > 0 and award.player_id not in eligible:
                self._warn(
                    f"Hand {self.record.hand_id}: {award.player_id} is awarded {award.amount} "
                    "without being eligible for any pot."
                )
        return awards

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(InconsistentAction(message))

    def _collections(self, awards: list[PotAward]) -> list[TimelineEntry]:
        multiple = len({award.pot_index for award in awards}) > 1
        ordered = sorted(awards, key=lambda award: -award.pot_index) if multiple else awards
        return [
            TimelineEntry(
                sequence=self.state.last_sequence,
                street=Street.SHOWDOWN,
                player_id=award.player_id,
                kind=ActionKind.COLLECT_POT,
                amount=award.amount,
                pot_index=award.pot_index,
                synthetic=True,
            )
            for award in ordered
            if award.amount > 0
        ]

    def _results(self, awards: list[PotAward]) -> dict[str, PlayerResult]:
        won: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for award in awards:
            won[award.player_id] += award.amount

        shown: dict[str, _Reveal] = {}
        mucked: dict[str, tuple[str, ...]] = {}
        for reveal in self.reveals:
            if reveal.action.kind == ActionKind.SHOW_CARDS:
                shown[reveal.action.player_id] = reveal
            else:
                mucked[reveal.action.player_id] = reveal.action.cards

        results = {}
        for ledger in self.order:
            reveal = shown.get(ledger.player_id)
            results[ledger.player_id] = PlayerResult(
                player_id=ledger.player_id,
                contributed=ledger.contributed,
                won=won[ledger.player_id],
                final_stack=ledger.stack + won[ledger.player_id],
                folded_on=ledger.folded_on,
                put_in_before_flop=self._put_in_before_flop(ledger.player_id),
                all_in=ledger.all_in,
                shown_cards=reveal.action.cards if reveal else (),
                mucked=ledger.player_id in mucked and reveal is None,
                mucked_cards=mucked.get(ledger.player_id, ()) if reveal is None else (),
                description=reveal.description if reveal else None,
            )
        return results

    def _put_in_before_flop(self, player_id: str) -> bool:
        return any(
            entry.player_id == player_id
            and entry.kind not in (ActionKind.POST_ANTE, ActionKind.UNCALLED_BET_RETURN)
            and (entry.amount or ZERO) > 0
            for entry in self.state.entries.get(Street.PREFLOP, [])
        )


def reconstruct(
    record: HandRecord,
    epsilon: Decimal = DEFAULT_EPSILON,
    raise_amounts: RaiseAmounts = "to",
) -> DerivedTimeline:
    return TimelineBuilder(record, epsilon=epsilon, raise_amounts=raise_amounts).build()
