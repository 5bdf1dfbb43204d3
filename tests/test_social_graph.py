from datetime import datetime, timezone

from fitsocial.data_models import Friendship, parse_timestamp
from fitsocial.social_graph import build_graph, friends_of, friendship_status, mutual_friend_count


def test_build_graph_uses_only_accepted_edges(chain_graph):
    assert chain_graph == {"A": {"B"}, "B": {"A", "C"}, "C": {"B"}}


def test_build_graph_empty_and_none():
    assert build_graph([]) == {}
    assert build_graph(None) == {}


def test_build_graph_is_symmetric_and_ignores_duplicates():
    graph = build_graph(
        [
            Friendship("A", "B", "accepted"),
            Friendship("B", "A", "accepted"),
            Friendship("C", "D", "declined"),
        ]
    )
    assert graph == {"A": {"B"}, "B": {"A"}}
    for user, friends in graph.items():
        for friend in friends:
            assert user in graph[friend]


def test_friends_of_unknown_user_is_empty(chain_graph):
    assert friends_of(chain_graph, "Z") == set()
    assert friends_of(None, "A") == set()


def test_mutual_friend_count(chain_graph):
    assert mutual_friend_count(chain_graph, "A", "C") == 1
    assert mutual_friend_count(chain_graph, "A", "B") == 0


def test_friendship_status_checks_both_directions():
    edges = [Friendship("A", "B", "pending"), Friendship("C", "A", "accepted")]
    assert friendship_status(edges, "B", "A") == "pending"
    assert friendship_status(edges, "A", "C") == "accepted"
    assert friendship_status(edges, "A", "D") is None


def test_friendship_from_row_defaults_to_pending():
    assert Friendship.from_row({"user_id": "A", "friend_id": "B"}).status == "pending"


def test_parse_timestamp_accepts_zulu_strings_and_naive_datetimes():
    parsed = parse_timestamp("2025-10-03T18:30:00Z")
    assert parsed == datetime(2025, 10, 3, 18, 30, tzinfo=timezone.utc)
    assert parse_timestamp(datetime(2025, 10, 3, 18, 30)).tzinfo == timezone.utc
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None


def test_parse_timestamp_tolerates_short_fractions_and_garbage():
    parsed = parse_timestamp("2025-10-03T18:30:00.12+00:00")
    assert parsed == datetime(2025, 10, 3, 18, 30, 0, 120000, tzinfo=timezone.utc)
    assert parse_timestamp("2025-10-03T18:30:00.1234567Z").microsecond == 123456
    assert parse_timestamp("not-a-date") is None
