import pytest

from fitsocial.data_models import Friendship
from fitsocial.friend_suggestions import FriendSuggestionRanker, jaccard_similarity
from fitsocial.social_graph import build_graph


def _graph(*pairs):
    return build_graph(Friendship(a, b, "accepted") for a, b in pairs)


def test_friend_of_friend_gets_low_friend_count_bonus(chain_graph):
    suggestions = FriendSuggestionRanker(chain_graph).suggest_friends("A")

    assert len(suggestions) == 1
    assert suggestions[0].user_id == "C"
    assert suggestions[0].mutual_friends == 1
    assert suggestions[0].score == 30


def test_empty_graph_has_no_suggestions():
    ranker = FriendSuggestionRanker(build_graph([]))
    assert ranker.suggest_friends("X") == []
    assert ranker.suggest_friends_multi_hop("X") == []


def test_three_mutual_friends_get_quadratic_bonus():
    graph = _graph(("T", "F1"), ("T", "F2"), ("T", "F3"), ("F1", "C"), ("F2", "C"), ("F3", "C"))
    [suggestion] = FriendSuggestionRanker(graph).suggest_friends("T")

    # 3 * 10 + 3^2 * 5 + 20 (C has only 3 friends)
    assert suggestion.mutual_friends == 3
    assert suggestion.score == 95


def test_popular_candidate_is_penalised():
    graph = _graph(("T", "F"), ("F", "C"), *[("C", f"x{i}") for i in range(101)])
    [suggestion] = FriendSuggestionRanker(graph).suggest_friends("T")
    assert suggestion.score == 0


def test_suggestions_sorted_and_exclude_self_and_friends():
    graph = _graph(("T", "F1"), ("T", "F2"), ("F1", "F2"), ("F1", "C1"), ("F2", "C1"), ("F2", "C2"))
    suggestions = FriendSuggestionRanker(graph).suggest_friends("T")

    assert [s.user_id for s in suggestions] == ["C1", "C2"]
    assert [s.mutual_friends for s in suggestions] == [2, 1]


def test_max_suggestions_limits_results():
    graph = _graph(("T", "F"), *[("F", f"c{i}") for i in range(5)])
    assert len(FriendSuggestionRanker(graph).suggest_friends("T", max_suggestions=3)) == 3


def test_multi_hop_counts_shallow_revisits_and_scores_by_distance():
    graph = _graph(("A", "B"), ("A", "C"), ("B", "D"), ("C", "D"), ("D", "E"))
    ranker = FriendSuggestionRanker(graph)

    two_hops = ranker.suggest_friends_multi_hop("A")
    assert [(s.user_id, s.mutual_friends, s.hop_distance, s.score) for s in two_hops] == [("D", 2, 2, 10)]

    three_hops = ranker.suggest_friends_multi_hop("A", max_hops=3)
    by_user = {s.user_id: s for s in three_hops}
    assert set(by_user) == {"D", "E"}
    assert by_user["E"].hop_distance == 3
    assert by_user["E"].score == 1 * 10 - 3 * 5


def test_multi_hop_never_suggests_direct_friends():
    graph = _graph(("A", "B"), ("A", "C"), ("B", "C"), ("C", "D"))
    suggestions = FriendSuggestionRanker(graph).suggest_friends_multi_hop("A", max_hops=3)
    assert [s.user_id for s in suggestions] == ["D"]


def test_jaccard_similarity():
    assert jaccard_similarity({"A", "B", "C"}, {"B", "C", "D"}) == pytest.approx(0.5)
    assert jaccard_similarity(set(), set()) == 0.0


def test_interest_suggestions_apply_threshold():
    interests = {
        "T": {"A", "B", "C"},
        "U1": {"B", "C", "D"},
        "U2": {"A"} | {f"x{i}" for i in range(7)},  # 1 / 10 == threshold, excluded
        "U3": {"z"},
    }
    suggestions = FriendSuggestionRanker({}).suggest_by_interest("T", interests)

    assert [s.user_id for s in suggestions] == ["U1"]
    assert suggestions[0].similarity == pytest.approx(0.5)
    assert suggestions[0].score == pytest.approx(50)
    assert suggestions[0].common_interests == ["B", "C"]


def test_interest_suggestions_without_data():
    assert FriendSuggestionRanker({}).suggest_by_interest("T", {}) == []


def test_hybrid_merges_mutual_and_interest_scores(chain_graph):
    interests = {"A": {"x", "y"}, "C": {"x", "y"}, "D": {"x"}}
    suggestions = FriendSuggestionRanker(chain_graph).suggest_hybrid("A", interests)

    assert [s.user_id for s in suggestions] == ["C", "D"]
    assert suggestions[0].mutual_score == 30
    assert suggestions[0].total_score == pytest.approx(30 * 0.6 + 100 * 0.4)
    assert suggestions[1].mutual_score == 0
    assert suggestions[1].total_score == pytest.approx(50 * 0.4)


def test_hybrid_accepts_custom_weights(chain_graph):
    interests = {"A": {"x"}, "C": {"x"}}
    [suggestion] = FriendSuggestionRanker(chain_graph).suggest_hybrid(
        "A", interests, weights={"mutual": 1.0, "interest": 0.0}
    )
    assert suggestion.total_score == pytest.approx(30)
