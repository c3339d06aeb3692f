from __future__ import annotations

import json
import logging
import re
from decimal import Decimal

from pydantic import ValidationError

from .errors import MalformedRecord, UnsupportedVariant
from .formatting import normalize_card
from .hand import (
    WAGER_KINDS,
    Action,
    ActionKind,
    BettingStructure,
    BoardStreet,
    GameVariant,
    HandRecord,
    PotAward,
    Seat,
    Street,
)
from .ohh import ActionModel, OhhHandModel, RoundModel

logger = logging.getLogger(__name__)

_ACTION_KINDS = {
    "dealtcards": ActionKind.DEALT_CARDS,
    "postante": ActionKind.POST_ANTE,
    "postsb": ActionKind.POST_SMALL_BLIND,
    "postbb": ActionKind.POST_BIG_BLIND,
    "postextrablind": ActionKind.POST_BIG_BLIND,
    "straddle": ActionKind.POST_STRADDLE,
    "poststraddle": ActionKind.POST_STRADDLE,
    "postdead": ActionKind.POST_DEAD,
    "fold": ActionKind.FOLD,
    "check": ActionKind.CHECK,
    "call": ActionKind.CALL,
    "bet": ActionKind.BET,
    "raise": ActionKind.RAISE,
    "showscards": ActionKind.SHOW_CARDS,
    "showcards": ActionKind.SHOW_CARDS,
    "showshand": ActionKind.SHOW_CARDS,
    "muckscards": ActionKind.MUCK_CARDS,
    "muckcards": ActionKind.MUCK_CARDS,
    "muck": ActionKind.MUCK_CARDS,
}

# OHH seat and stack bookkeeping that never reaches the pot.
_BOOKKEEPING_ACTIONS = frozenset({"sitsdown", "standsup", "sitsout", "sitsin", "addedchips", "addedtostack"})

_STREETS = {
    "preflop": Street.PREFLOP,
    "flop": Street.FLOP,
    "turn": Street.TURN,
    "river": Street.RIVER,
    "showdown": Street.SHOWDOWN,
}

_VARIANTS = {
    "holdem": GameVariant.HOLDEM,
    "texasholdem": GameVariant.HOLDEM,
    "omaha": GameVariant.OMAHA,
    "omahahi": GameVariant.OMAHA,
    "omahahilo": GameVariant.OMAHA_HI_LO,
    "omahahl": GameVariant.OMAHA_HI_LO,
    "omaha8": GameVariant.OMAHA_HI_LO,
}

_STRUCTURES = {
    "nl": BettingStructure.NO_LIMIT,
    "nolimit": BettingStructure.NO_LIMIT,
    "pl": BettingStructure.POT_LIMIT,
    "potlimit": BettingStructure.POT_LIMIT,
    "fl": BettingStructure.LIMIT,
    "limit": BettingStructure.LIMIT,
    "fixedlimit": BettingStructure.LIMIT,
}


def _key(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "", value.lower())


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "record"
    suffix = f" (+{exc.error_count() - 1} more)" if exc.error_count() > 1 else ""
    return f"{location}: {first.get('msg', 'invalid value')}{suffix}"


def parse(raw_text: str) -> HandRecord:
    """Parse one OHH record (wrapped in ``{"ohh": ...}`` or bare) into a HandRecord."""
    try:
        payload = json.loads(raw_text, parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise MalformedRecord(f"Record is not valid JSON: {exc.msg} at line {exc.lineno}.") from exc

    if isinstance(payload, dict) and isinstance(payload.get("ohh"), dict):
        payload = payload["ohh"]
    if not isinstance(payload, dict):
        raise MalformedRecord("Record must be a JSON object.")

    try:
        model = OhhHandModel.model_validate(payload)
    except ValidationError as exc:
        raise MalformedRecord(_describe_validation_error(exc)) from exc

    return build_record(model)


def build_record(model: OhhHandModel) -> HandRecord:
    hand_id = model.game_number.strip()
    if not hand_id:
        raise MalformedRecord("game_number must not be empty.")
    currency = model.currency.strip().upper()
    if not currency:
        raise MalformedRecord("currency must not be empty.")
    if model.dealer_seat < 1:
        raise MalformedRecord(f"dealer_seat must be a seat number, got {model.dealer_seat}.")

    seats = _build_seats(model)
    streets = _build_board(model.rounds)
    actions = _build_actions(model)
    if not actions:
        raise MalformedRecord(f"Hand {hand_id} has no actions.")

    awards: list[PotAward] = []
    rake = Decimal("0")
    for pot in model.pots:
        if pot.rake < 0:
            raise MalformedRecord(f"Pot {pot.number} has negative rake.")
        rake += pot.rake
        for win in pot.player_wins:
            if win.win_amount < 0:
                raise MalformedRecord(f"Pot {pot.number} awards a negative amount to {win.player_id}.")
            awards.append(PotAward(player_id=win.player_id, amount=win.win_amount, pot_index=pot.number))

    for label, value in (
        ("small_blind_amount", model.small_blind_amount),
        ("big_blind_amount", model.big_blind_amount),
        ("ante_amount", model.ante_amount),
    ):
        if value < 0:
            raise MalformedRecord(f"{label} must not be negative.")

    highest_seat = max(seat.number for seat in seats)
    return HandRecord(
        hand_id=hand_id,
        currency=currency,
        button_seat=model.dealer_seat,
        seats=seats,
        actions=actions,
        streets=streets,
        pot_awards=tuple(awards),
        variant=_variant(model.game_type),
        structure=_structure(model.bet_limit.bet_type if model.bet_limit else None),
        started_at=model.start_date_utc,
        table_name=(model.table_name or "").strip() or "Unknown",
        max_seats=max(model.table_size or 0, highest_seat),
        small_blind=model.small_blind_amount,
        big_blind=model.big_blind_amount,
        ante=model.ante_amount,
        rake=rake,
        hero_player_id=model.hero_player_id,
    )


def _variant(game_type: str | None) -> GameVariant:
    if not game_type:
        return GameVariant.HOLDEM
    variant = _VARIANTS.get(_key(game_type))
    if variant is None:
        raise UnsupportedVariant(f"Game type {game_type!r} has no PokerStars text rendering.")
    return variant


def _structure(bet_type: str | None) -> BettingStructure:
    if not bet_type:
        return BettingStructure.NO_LIMIT
    structure = _STRUCTURES.get(_key(bet_type))
    if structure is None:
        raise UnsupportedVariant(f"Betting structure {bet_type!r} has no PokerStars text rendering.")
    return structure


def _build_seats(model: OhhHandModel) -> tuple[Seat, ...]:
    if len(model.players) < 2:
        raise MalformedRecord(f"Hand {model.game_number} needs at least two seats, got {len(model.players)}.")

    seen_numbers: set[int] = set()
    seen_ids: set[str] = set()
    seats: list[Seat] = []
    for player in model.players:
        if player.seat < 1:
            raise MalformedRecord(f"Player {player.id} has invalid seat {player.seat}.")
        if player.seat in seen_numbers:
            raise MalformedRecord(f"Seat {player.seat} is listed twice.")
        if player.id in seen_ids:
            raise MalformedRecord(f"Player id {player.id} is listed twice.")
        if player.starting_stack < 0:
            raise MalformedRecord(f"Player {player.id} has a negative starting stack.")
        seen_numbers.add(player.seat)
        seen_ids.add(player.id)
        seats.append(
            Seat(
                number=player.seat,
                player_id=player.id,
                name=player.name,
                starting_stack=player.starting_stack,
                display_name=player.display,
            )
        )
    return tuple(sorted(seats, key=lambda seat: seat.number))


def _street(round_model: RoundModel) -> Street:
    street = _STREETS.get(_key(round_model.street))
    if street is None:
        raise MalformedRecord(f"Unknown street {round_model.street!r}.")
    return street


def _cards(raw_cards: list[str] | None) -> tuple[str, ...]:
    cards: list[str] = []
    for raw in raw_cards or []:
        try:
            card = normalize_card(raw)
        except ValueError as exc:
            raise MalformedRecord(str(exc)) from exc
        if card is not None:
            cards.append(card)
    return tuple(cards)


def _build_board(rounds: list[RoundModel]) -> tuple[BoardStreet, ...]:
    board: list[str] = []
    by_street: dict[Street, list[str]] = {}
    for round_model in rounds:
        street = _street(round_model)
        if street in (Street.PREFLOP, Street.SHOWDOWN):
            continue
        cards = list(_cards(round_model.cards))
        # Some producers repeat the earlier board on later streets.
        if board and len(cards) > len(board) and cards[: len(board)] == board:
            cards = cards[len(board) :]
        if not cards:
            continue
        board.extend(cards)
        by_street.setdefault(street, []).extend(cards)
    return tuple(BoardStreet(street=street, cards=tuple(cards)) for street, cards in by_street.items())


def _build_actions(model: OhhHandModel) -> tuple[Action, ...]:
    flattened: list[tuple[Street, ActionModel]] = []
    for round_model in model.rounds:
        street = _street(round_model)
        in_round = sorted(
            enumerate(round_model.actions),
            key=lambda item: (item[1].action_number if item[1].action_number is not None else item[0], item[0]),
        )
        flattened.extend((street, action) for _, action in in_round)

    numbers = [action.action_number for _, action in flattened]
    hand_wide = all(number is not None for number in numbers) and len(set(numbers)) == len(numbers)
    if hand_wide:
        flattened.sort(key=lambda item: item[1].action_number)  # type: ignore[arg-type, return-value]

    actions: list[Action] = []
    for index, (street, action_model) in enumerate(flattened):
        kind = _ACTION_KINDS.get(_key(action_model.action))
        if kind is None:
            if _key(action_model.action) not in _BOOKKEEPING_ACTIONS and (action_model.amount or 0) > 0:
                raise MalformedRecord(
                    f"Action {action_model.action!r} moves {action_model.amount} in hand {model.game_number} "
                    "but has no PokerStars rendering."
                )
            logger.debug("Skipping OHH action %r in hand %s", action_model.action, model.game_number)
            continue
        if action_model.player_id is None:
            logger.debug("Skipping %r without a player in hand %s", action_model.action, model.game_number)
            continue

        amount: Decimal | None = None
        if kind in WAGER_KINDS:
            if action_model.amount is None:
                raise MalformedRecord(
                    f"{action_model.action} by {action_model.player_id} in hand {model.game_number} has no amount."
                )
            if action_model.amount < 0:
                raise MalformedRecord(f"{action_model.action} by {action_model.player_id} has a negative amount.")
            amount = action_model.amount

        sequence = action_model.action_number if hand_wide else index
        actions.append(
            Action(
                sequence=sequence,  # type: ignore[arg-type]
                player_id=action_model.player_id,
                kind=kind,
                street=street,
                amount=amount,
                cards=_cards(action_model.cards),
                flagged_all_in=bool(action_model.is_allin),
            )
        )
    return tuple(actions)
