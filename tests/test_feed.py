from datetime import timedelta

import pytest

from fitsocial.data_models import FeedItem
from fitsocial.feed import FeedScorer, build_feed_items, group_by


def _post(post_id, post_type, date, kudos=(), comments=(), user_id="author"):
    return FeedItem(
        id=post_id,
        type=post_type,
        date=date,
        user_id=user_id,
        kudos=list(kudos),
        comments=list(comments),
    )


def test_fresh_engaged_run_outranks_stale_workout(now):
    fresh = _post("p1", "run", now, kudos=[{"user_id": "x"}, {"user_id": "y"}], comments=[{"user_id": "z"}])
    stale = _post("p2", "workout", now - timedelta(hours=60))
    scorer = FeedScorer()

    assert scorer.score_post(fresh, "viewer", now) == pytest.approx(148.5)
    assert scorer.score_post(stale, "viewer", now) == pytest.approx(0)
    assert [p.id for p in scorer.rank_feed([stale, fresh], "viewer", now=now)] == ["p1", "p2"]


def test_recency_never_negative(now):
    post = _post("old", "pr", now - timedelta(days=30))
    assert FeedScorer().score_post(post, "viewer", now) == 0


def test_viewer_kudos_bonus_requires_matching_type(now):
    post = _post("p", "workout", now - timedelta(hours=50), kudos=[{"user_id": "viewer", "post_type": "workout"}])
    other_type = _post("q", "workout", now - timedelta(hours=50), kudos=[{"user_id": "viewer", "post_type": "run"}])
    scorer = FeedScorer()

    # recency 0, one kudo (10) * 1.2, plus 10 for the viewer's own kudo
    assert scorer.score_post(post, "viewer", now) == pytest.approx(22)
    assert scorer.score_post(other_type, "viewer", now) == pytest.approx(12)


def test_relationship_weight_and_unknown_type(now):
    post = _post("p", "story", now - timedelta(hours=10), user_id="close_friend")
    scorer = FeedScorer(relationship_weights={"close_friend": 2})
    assert scorer.score_post(post, "viewer", now) == pytest.approx(160)


def test_rank_feed_limit_and_empty(now):
    posts = [_post(f"p{i}", "workout", now - timedelta(hours=i)) for i in range(5)]
    ranked = FeedScorer().rank_feed(posts, "viewer", limit=2, now=now)

    assert [p.id for p in ranked] == ["p0", "p1"]
    assert FeedScorer().rank_feed([], "viewer", now=now) == []
    assert FeedScorer().rank_feed(None, "viewer", now=now) == []


def test_build_feed_items_normalises_sources(now):
    workouts = [{"id": "w1", "user_id": "u1", "completed_at": now - timedelta(hours=3)}]
    mentals = [{"id": "m1", "profile_id": "u2", "completed_at": (now - timedelta(hours=1)).isoformat()}]
    prs = [{"id": "p1", "profile_id": "u3", "created_at": now - timedelta(hours=2)}]
    runs = [
        {"id": "r1", "user_id": "u4", "start_time": now - timedelta(hours=4)},
        {"id": "r2", "user_id": "u4", "start_time": None},
    ]
    kudos = {"w1": [{"user_id": "viewer"}], "p1": [{"user_id": "viewer"}]}
    comments = {"r1": [{"user_id": "u1", "content": "nice"}]}

    items = build_feed_items(workouts, mentals, prs, runs, kudos, comments)

    assert [(i.id, i.type, i.user_id) for i in items] == [
        ("m1", "mental", "u2"),
        ("p1", "pr", "u3"),
        ("w1", "workout", "u1"),
        ("r1", "run", "u4"),
    ]
    by_id = {item.id: item for item in items}
    assert by_id["w1"].kudos == [{"post_type": "workout", "user_id": "viewer"}]
    assert by_id["p1"].kudos == []
    assert len(by_id["r1"].comments) == 1
    assert by_id["m1"].date.tzinfo is not None


def test_viewer_kudos_from_build_feed_items_earn_bonus(now):
    workouts = [{"id": "w1", "user_id": "u1", "completed_at": now - timedelta(hours=50)}]
    [item] = build_feed_items(workouts=workouts, kudos_by_item={"w1": [{"user_id": "viewer"}]})
    assert FeedScorer().score_post(item, "viewer", now) == pytest.approx(22)


def test_group_by():
    rows = [{"run_id": "r1", "user_id": "a"}, {"run_id": "r2", "user_id": "b"}, {"run_id": "r1", "user_id": "c"}]
    grouped = group_by(rows, "run_id")
    assert [row["user_id"] for row in grouped["r1"]] == ["a", "c"]
    assert group_by(None, "run_id") == {}


def test_naive_post_dates_are_treated_as_utc(now):
    naive_now = now.replace(tzinfo=None)
    post = _post("p", "run", naive_now - timedelta(hours=1))

    assert post.date.tzinfo is not None
    assert FeedScorer().score_post(post, "viewer", now) == pytest.approx(98 * 1.1)
    assert [p.id for p in FeedScorer().rank_feed([post], "viewer", now=naive_now)] == ["p"]


def test_post_without_date_scores_engagement_only(now):
    post = _post("p", "workout", "not-a-date", kudos=[{"user_id": "x"}])
    assert post.date is None
    assert FeedScorer().score_post(post, "viewer", now) == pytest.approx(12)


def test_score_is_deterministic_for_fixed_now(now):
    post = _post("p", "mental", now - timedelta(hours=7), kudos=[{"user_id": "x"}], comments=[{"user_id": "y"}])
    scorer = FeedScorer()
    assert scorer.score_post(post, "viewer", now) == scorer.score_post(post, "viewer", now)
