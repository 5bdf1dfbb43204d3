from datetime import timedelta

import pytest

from fitsocial.challenges import (
    ChallengeRecommender,
    challenge_leaderboard,
    challenges_by_type,
    difficulty_bonus,
    progress_percent,
    progress_status,
    social_score,
    time_bonus,
    trending_challenges,
)
from fitsocial.data_models import Profile


class RecordingScorer:
    def __init__(self, score=0.5):
        self.value = score
        self.calls = []

    def score(self, context, challenge_features):
        self.calls.append((context, challenge_features))
        return {features["challenge_id"]: self.value for features in challenge_features}


def test_weighted_score_matches_hand_calculation(now, make_challenge):
    challenge = make_challenge("c1", difficulty="hard", reward_points=100)
    interests = {"workout": 80, "mental": 20, "run": 20}

    [recommendation] = ChallengeRecommender().recommend(
        "u1", interests, [challenge], participant_counts={"c1": 3}, now=now
    )

    assert recommendation.score == pytest.approx(36.25)
    assert recommendation.breakdown == {
        "interest": 80,
        "difficulty": -10,
        "time": 20,
        "social": 15,
        "reward": 10,
    }


@pytest.mark.parametrize(
    "days_left, expected",
    [(0, -50), (-2, -50), (1, 30), (3, 20), (7, 10), (8, 5), (14, 5), (30, 0)],
)
def test_time_bonus_boundaries(now, days_left, expected):
    assert time_bonus(now + timedelta(days=days_left), now) == expected


def test_time_bonus_without_end_date(now):
    assert time_bonus(None, now) == 0


def test_difficulty_bonus_gaps():
    assert difficulty_bonus("medium", {"a": 45, "b": 55}) == 20
    assert difficulty_bonus("hard", {"a": 50}) == 10
    assert difficulty_bonus("expert", {"a": 10}) == -10
    # unknown difficulty is treated as medium
    assert difficulty_bonus("legendary", {"a": 50}) == 20
    assert difficulty_bonus("easy", {}) == -10


def test_social_score_caps_at_25():
    assert social_score(2) == 10
    assert social_score(40) == 25
    assert social_score(0) == 0


def test_recommend_skips_joined_sorts_and_limits(now, make_challenge):
    challenges = [
        make_challenge("run", type="run"),
        make_challenge("workout", type="workout"),
        make_challenge("mental", type="mental"),
    ]
    interests = {"workout": 60, "mental": 40, "run": 20}

    ranked = ChallengeRecommender().recommend(
        "u1", interests, challenges, limit=1, joined_challenge_ids={"workout"}, now=now
    )
    assert [r.challenge.id for r in ranked] == ["mental"]

    everything = ChallengeRecommender().recommend("u1", interests, challenges, now=now)
    assert [r.challenge.id for r in everything] == ["workout", "mental", "run"]
    assert all(a.score >= b.score for a, b in zip(everything, everything[1:]))


def test_recommend_with_empty_inputs(now, make_challenge):
    assert ChallengeRecommender().recommend("u1", {}, [], now=now) == []
    assert ChallengeRecommender().recommend("u1", None, None, now=now) == []
    [only] = ChallengeRecommender().recommend("u1", None, [make_challenge()], now=now)
    assert only.breakdown["interest"] == 0


def test_zero_shot_bonus_only_for_unknown_types(now, make_challenge):
    scorer = RecordingScorer(score=0.5)
    challenges = [make_challenge("known", type="workout"), make_challenge("new", type="creativity")]

    ranked = ChallengeRecommender(zero_shot_scorer=scorer).recommend(
        "u1", {"workout": 50, "creativity": 0}, challenges, now=now
    )
    by_id = {r.challenge.id: r for r in ranked}

    [(context, features)] = scorer.calls
    assert [f["challenge_id"] for f in features] == ["new"]
    assert context["user_id"] == "u1"
    assert by_id["new"].breakdown["llm"] == 0.5
    assert "llm" not in by_id["known"].breakdown

    baseline = ChallengeRecommender().recommend("u1", {"workout": 50, "creativity": 0}, challenges, now=now)
    baseline_new = next(r for r in baseline if r.challenge.id == "new")
    assert by_id["new"].score == pytest.approx(baseline_new.score + 10)


def test_trending_and_by_type_only_include_open_challenges(now, make_challenge):
    challenges = [
        make_challenge("a", type="run", created_at=now - timedelta(days=5)),
        make_challenge("b", type="run", created_at=now - timedelta(days=1)),
        make_challenge("expired", type="run", end_date=now - timedelta(hours=1)),
        make_challenge("inactive", type="run", is_active=False),
    ]
    counts = {"a": 9, "b": 2, "expired": 50, "inactive": 40}

    assert [c.id for c in trending_challenges(challenges, counts, now=now)] == ["a", "b"]
    assert [c.id for c in challenges_by_type(challenges, "run", now=now)] == ["b", "a"]
    assert challenges_by_type(challenges, "sleep", now=now) == []


def test_leaderboard_ranks_by_progress(now):
    rows = [
        {"user_id": "u1", "progress": 3, "joined_at": now},
        {"user_id": "u2", "progress": 9, "joined_at": now.isoformat()},
        {"user_id": "u3", "progress": None, "joined_at": None},
    ]
    profiles = {"u2": Profile(id="u2", username="bea")}

    board = challenge_leaderboard(rows, profiles, limit=2)

    assert [(e.rank, e.progress) for e in board] == [(1, 9), (2, 3)]
    assert board[0].user.username == "bea"
    assert board[1].user is None
    assert board[0].joined_at == now


@pytest.mark.parametrize(
    "current, target, percent, status",
    [
        (0, 0, 0, "IN PROGRESS"),
        (5, 20, 25, "IN PROGRESS"),
        (10, 20, 50, "HALFWAY"),
        (15, 20, 75, "ALMOST DONE"),
        (30, 20, 100, "COMPLETED"),
    ],
)
def test_progress_percent_and_status(current, target, percent, status):
    value = progress_percent(current, target)
    assert value == pytest.approx(percent)
    assert progress_status(value) == status


def test_naive_challenge_dates_are_treated_as_utc(now, make_challenge):
    naive_now = now.replace(tzinfo=None)
    challenge = make_challenge(
        "naive", end_date=naive_now + timedelta(days=2), created_at=naive_now - timedelta(days=1)
    )

    assert challenge.end_date.tzinfo is not None
    [recommendation] = ChallengeRecommender().recommend("u1", {"run": 50}, [challenge], now=now)
    assert recommendation.breakdown["time"] == 20
    assert time_bonus(naive_now + timedelta(days=2), naive_now) == 20
    assert [c.id for c in trending_challenges([challenge], now=naive_now)] == ["naive"]
    assert [c.id for c in challenges_by_type([challenge], "workout", now=now)] == ["naive"]


def test_unparseable_end_date_gets_no_time_bonus(now, make_challenge):
    challenge = make_challenge("broken", end_date="someday")
    assert challenge.end_date is None
    [recommendation] = ChallengeRecommender().recommend("u1", {"workout": 50}, [challenge], now=now)
    assert recommendation.breakdown["time"] == 0
