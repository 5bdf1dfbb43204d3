import pytest

from fitsocial.demo_data import create_sample_tables
from fitsocial.interests import DEFAULT_INTERESTS
from fitsocial.service import CommunityService
from fitsocial.store import InMemoryStore, StoreError


class FailingStore(InMemoryStore):
    def select(self, table, **query):
        raise StoreError(f"connection refused while reading {table}")


def test_social_graph_contains_only_accepted_friends(sample_service):
    graph = sample_service.social_graph()
    assert graph["u_alex"] == {"u_bella", "u_chris"}
    assert "u_hana" not in graph["u_alex"]


def test_friend_suggestion_modes(sample_service):
    mutual = sample_service.friend_suggestions("u_alex")
    assert [(s.user_id, s.mutual_friends, s.score) for s in mutual] == [("u_dana", 2, 40), ("u_fay", 1, 30)]

    multi_hop = sample_service.friend_suggestions("u_alex", mode="multi_hop")
    assert [(s.user_id, s.score) for s in multi_hop] == [("u_dana", 10), ("u_fay", 0)]

    hybrid = sample_service.friend_suggestions("u_alex", mode="hybrid")
    assert hybrid
    assert all(h.user_id not in {"u_alex", "u_bella", "u_chris"} for h in hybrid)

    with pytest.raises(ValueError):
        sample_service.friend_suggestions("u_alex", mode="random")


def test_interest_sets_collect_lowercase_labels(sample_service):
    interests = sample_service.interest_sets()
    assert {"build_muscle", "push day", "meditation", "bench press", "running"} <= interests["u_alex"]
    assert "running" in interests["u_dana"]


def test_feed_includes_viewer_and_friends_only(sample_service, now):
    feed = sample_service.fetch_feed("u_alex", now=now)

    assert [item.id for item in feed[:3]] == ["w5", "p2", "m2"]
    assert {item.user_id for item in feed} == {"u_alex", "u_bella", "u_chris"}
    assert len(sample_service.fetch_feed("u_alex", limit=4, now=now)) == 4


def test_recommend_challenges_for_sample_user(sample_service, now):
    recommendations = sample_service.recommend_challenges("u_alex", now=now)

    assert [r.challenge.id for r in recommendations] == ["c_push", "c_calm", "c_sleep", "c_pr", "c_water"]
    assert recommendations[0].score == pytest.approx(30.25)
    assert recommendations[1].score == pytest.approx(22.0)


def test_compatible_profiles_and_groups(sample_service):
    ranked = sample_service.compatible_profiles("u_alex")
    assert [(p.id, score) for p, score in ranked] == [("u_eli", 80), ("u_dana", 50), ("u_hana", 50), ("u_fay", 0)]

    groups = sample_service.suggested_groups("u_alex")
    assert [g.group.id for g in groups] == ["g_runners", "g_calm"]
    assert sample_service.compatible_profiles("nobody") == []


def test_user_challenges_leaderboard_and_progress(sample_service, now):
    [(challenge, progress)] = sample_service.user_challenges("u_alex")
    assert (challenge.id, progress) == ("c_100k", 22)

    board = sample_service.challenge_leaderboard("c_push")
    assert [(e.rank, e.user.username, e.progress) for e in board] == [(1, "eli", 18), (2, "chris", 12), (3, "bella", 4)]

    assert sample_service.update_progress("u_alex", "c_100k", 30, now=now) is True
    assert sample_service.user_challenges("u_alex")[0][1] == 30
    assert len(sample_service.store.select("challenge_progress_logs")) == 1


def test_failing_store_degrades_to_empty_results(now):
    service = CommunityService(FailingStore(create_sample_tables(now)))

    assert service.social_graph() == {}
    assert service.friend_suggestions("u_alex") == []
    assert service.fetch_feed("u_alex", now=now) == []
    assert service.analyze_user_interests("u_alex") == DEFAULT_INTERESTS
    assert service.recommend_challenges("u_alex", now=now) == []
    assert service.suggested_groups("u_alex") == []


def test_update_progress_reports_store_errors(now):
    assert CommunityService(InMemoryStore()).update_progress("u_alex", "c1", 5, now=now) is False


def test_malformed_timestamps_degrade_instead_of_raising(now):
    tables = create_sample_tables(now)
    tables["user_workout_logs"].append(
        {"id": "bad", "user_id": "u_alex", "workout_name": "Strength", "completed_at": "not-a-date"}
    )
    tables["challenges"].append(
        {"id": "c_bad", "title": "Broken", "type": "run", "difficulty": "easy", "target": 1,
         "unit": "km", "reward_points": 10, "end_date": "someday", "created_at": "yesterday", "is_active": True}
    )
    service = CommunityService(InMemoryStore(tables))

    feed = service.fetch_feed("u_alex", now=now)
    assert feed
    assert "bad" not in {item.id for item in feed}

    assert service.analyze_user_interests("u_alex")["workout"] > 0
    recommended = [r.challenge.id for r in service.recommend_challenges("u_alex", now=now)]
    assert "c_bad" not in recommended
    assert "c_push" in recommended
