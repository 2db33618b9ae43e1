from types import SimpleNamespace

import pytest

from app.libs.formats.datetime import start_of_week
from app.services.user.learning import completion_percent, percent, quiz_reward, score_answers


def questions(*correct):
    return [SimpleNamespace(correct_answer=c) for c in correct]


def test_score_counts_matching_positions():
    assert score_answers(questions(0, 1, 2), [0, 1, 2]) == 3
    assert score_answers(questions(0, 1, 2), [2, 1, 0]) == 1


def test_score_treats_missing_and_extra_answers():
    assert score_answers(questions(0, 1, 2), [0]) == 1
    assert score_answers(questions(0, 1, 2), [0, None, 2]) == 2
    assert score_answers(questions(0), [0, 1, 1, 1]) == 1
    assert score_answers([], [0, 1]) == 0


@pytest.mark.parametrize(
    "ratio, reward",
    [(1.0, 50), (0.8, 50), (0.79, 30), (0.6, 30), (0.59, 0), (0.0, 0)],
)
def test_quiz_reward_tiers(ratio, reward):
    assert quiz_reward(ratio) == reward


def test_completion_percent():
    assert completion_percent(0, 4) == 0
    assert completion_percent(1, 3) == 33
    assert completion_percent(2, 3) == 67
    assert completion_percent(3, 3) == 100
    assert completion_percent(5, 3) == 100
    assert completion_percent(1, 0) == 0


@pytest.mark.parametrize(
    "part, whole, expected",
    [(1, 8, 13), (5, 8, 63), (3, 8, 38), (1, 200, 1), (1, 3, 33), (0, 8, 0)],
)
def test_percent_rounds_halves_up(part, whole, expected):
    assert percent(part, whole) == expected
    assert completion_percent(part, whole) == expected


def test_weeks_start_on_sunday():
    from datetime import datetime

    wednesday = datetime(2024, 5, 15, 13, 30)
    sunday = datetime(2024, 5, 12, 9, 0)
    assert start_of_week(wednesday) == datetime(2024, 5, 12)
    assert start_of_week(sunday) == datetime(2024, 5, 12)
