from backend.converter.evaluator import FLUSH, HIGH_CARD, STRAIGHT, HandEvaluator
from backend.converter.hand import GameVariant


def _describe(hole: list[str], board: list[str], variant: GameVariant = GameVariant.HOLDEM) -> str:
    evaluator = HandEvaluator()
    rank = evaluator.best_rank(hole, board, variant)
    assert rank is not None
    return evaluator.describe(rank)


def test_descriptions_match_pokerstars_wording() -> None:
    board = ["Kd", "9s", "4h", "3c", "Jd"]

    assert _describe(["As", "Ah"], board) == "a pair of Aces"
    assert _describe(["Kh", "Jc"], board) == "two pair, Kings and Jacks"
    assert _describe(["Ks", "Kh"], board) == "three of a kind, Kings"
    assert _describe(["Qh", "Tc"], board) == "a straight, Nine to King"
    assert _describe(["7c", "2d"], board) == "high card King"
    assert _describe(["6c", "6d"], ["6h", "Ks", "Kd", "2c", "3h"]) == "a full house, Sixes full of Kings"
    assert _describe(["Ad", "2d"], ["Qd", "8d", "5d", "Kc", "Kh"]) == "a flush, Ace high"
    assert _describe(["Ac", "2d"], ["3h", "4s", "5c", "Kd", "Kh"]) == "a straight, Ace to Five"
    assert _describe(["9h", "9c"], ["9d", "9s", "2c", "3h", "4d"]) == "four of a kind, Nines"
    assert _describe(["Ah", "Kh"], ["Qh", "Jh", "Th", "2c", "3d"]) == "a Royal Flush"
    assert _describe(["9h", "8h"], ["7h", "6h", "5h", "2c", "3d"]) == "a straight flush, Five to Nine"


def test_higher_category_wins() -> None:
    evaluator = HandEvaluator()
    board = ["Kd", "9s", "4h", "3c", "2d"]

    trips = evaluator.best_rank(["Ks", "Kh"], board, GameVariant.HOLDEM)
    aces = evaluator.best_rank(["As", "Ad"], board, GameVariant.HOLDEM)
    queens = evaluator.best_rank(["Qh", "Qc"], board, GameVariant.HOLDEM)
    assert trips > aces > queens


def test_wheel_ranks_below_six_high_straight() -> None:
    evaluator = HandEvaluator()
    board = ["2c", "3d", "4h", "5s", "Kd"]

    wheel = evaluator.best_rank(["Ah", "Qc"], board, GameVariant.HOLDEM)
    six_high = evaluator.best_rank(["6h", "Qc"], board, GameVariant.HOLDEM)
    assert wheel[0] == STRAIGHT
    assert six_high > wheel


def test_omaha_uses_exactly_two_hole_cards() -> None:
    evaluator = HandEvaluator()
    hole = ["As", "Ks", "Qs", "Js"]
    board = ["Ts", "2h", "3d", "4c", "9s"]

    holdem = evaluator.best_rank(hole, board, GameVariant.HOLDEM)
    omaha = evaluator.best_rank(hole, board, GameVariant.OMAHA)
    assert holdem[0] > FLUSH
    assert omaha[0] == HIGH_CARD


def test_incomplete_cards_have_no_rank() -> None:
    evaluator = HandEvaluator()

    assert evaluator.best_rank(["As", "Ah"], ["Kd", "9s"], GameVariant.HOLDEM) is None
    assert evaluator.best_rank(["As", "Ah", "Kc", "Kd"], ["2c", "3c"], GameVariant.OMAHA) is None
