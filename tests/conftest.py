from datetime import timedelta

import pytest

from fitsocial.data_models import Challenge, Friendship
from fitsocial.demo_data import BASE_TIME, create_sample_store
from fitsocial.service import CommunityService
from fitsocial.social_graph import build_graph


@pytest.fixture
def now():
    return BASE_TIME


@pytest.fixture
def sample_service(now):
    return CommunityService(create_sample_store(now))


@pytest.fixture
def chain_graph():
    # A - B - C, plus a pending A -> C request that must not count
    return build_graph(
        [
            Friendship("A", "B", "accepted"),
            Friendship("B", "C", "accepted"),
            Friendship("A", "C", "pending"),
        ]
    )


@pytest.fixture
def make_challenge(now):
    def _make(challenge_id="c1", **overrides):
        values = {
            "id": challenge_id,
            "type": "workout",
            "difficulty": "medium",
            "target": 10,
            "unit": "workouts",
            "reward_points": 100,
            "end_date": now + timedelta(days=2),
            "created_at": now - timedelta(days=1),
            "title": f"Challenge {challenge_id}",
        }
        values.update(overrides)
        return Challenge(**values)

    return _make
