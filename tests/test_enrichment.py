import pytest

from numguess import FixedSecret, GameRound
from numguess import enrichment
from numguess.enrichment import code_hint, get_enricher, magnitude, parity, score_code


@pytest.fixture()
def game_round():
    return GameRound(FixedSecret(1234))


def test_timestamp(monkeypatch, game_round):
    monkeypatch.setattr(enrichment.time, "time", lambda: 1700000000.7)
    assert enrichment.timestamp("Try again!", 5, game_round) == "TIME: 1700000000 Try again!"


def test_parity(game_round):
    assert parity("Try again!", 8, game_round) == "Try again! (8 is even)"
    assert parity("Try again!", 7, game_round) == "Try again! (7 is odd)"


def test_magnitude(game_round):
    assert magnitude("Try again!", 1000, game_round) == "Try again! Go higher."
    assert magnitude("Try again!", 2000, game_round) == "Try again! Go lower."
    assert magnitude("Congratulations!", 1234, game_round) == "Congratulations!"


@pytest.mark.parametrize("guess,secret,expected", [
    (1234, 1234, (4, 0)),
    (4321, 1234, (0, 4)),
    (1122, 1212, (2, 2)),
    (1111, 1222, (1, 0)),
    (5678, 1234, (0, 0)),
    (42, 4200, (0, 4)),
])
def test_score_code(guess, secret, expected):
    assert score_code(guess, secret) == expected


def test_code_hint(game_round):
    assert code_hint("Try again!", 1243, game_round) == (
        "Try again! Hint: 2 correct position, 2 correct digit but wrong position"
    )
    assert code_hint("Congratulations!", 1234, game_round) == "Congratulations!"


def test_get_enricher_disabled():
    assert get_enricher(None) is None
    assert get_enricher("") is None
    assert get_enricher(" , ") is None


def test_get_enricher_single():
    assert get_enricher("Parity") is parity


def test_get_enricher_chains_left_to_right(game_round):
    hook = get_enricher("magnitude, parity")
    assert hook("Try again!", 7, game_round) == "Try again! Go higher. (7 is odd)"


def test_get_enricher_unknown():
    with pytest.raises(ValueError, match="Unknown enrichment 'sparkles'"):
        get_enricher("parity,sparkles")
