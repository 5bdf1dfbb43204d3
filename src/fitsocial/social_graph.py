"""소셜 그래프 모듈: 친구 관계 목록으로부터 무방향 인접 리스트를 구축하는 모듈

이 모듈은 다음 기능들을 제공합니다:
- 수락된 친구 관계만으로 대칭 인접 리스트 구축
- 사용자별 친구 집합 조회 (그래프에 없는 사용자는 빈 집합)
- 두 사용자 간 공통 친구 수 계산
- 두 사용자 간 친구 관계 상태 조회
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Set

from .data_models import FRIENDSHIP_ACCEPTED, Friendship

logger = logging.getLogger(__name__)

SocialGraph = Dict[str, Set[str]]


def build_graph(friendships: Optional[Iterable[Friendship]]) -> SocialGraph:
    """
    친구 관계 간선 목록으로 소셜 그래프(인접 리스트)를 구축하는 함수

    accepted 상태의 간선만 사용하며, 한 간선마다 양쪽 끝점을
    서로의 친구 집합에 넣어 대칭성을 보장합니다.
    중복 간선은 집합 특성상 자연스럽게 무시됩니다.

    Args:
        friendships: 친구 관계 간선 목록 (None이면 빈 목록으로 취급)

    Returns:
        사용자 ID -> 친구 ID 집합 매핑
    """
    graph: SocialGraph = {}

    for friendship in friendships or []:
        # 대기 중이거나 거절된 요청은 그래프에 포함하지 않음
        if friendship.status != FRIENDSHIP_ACCEPTED:
            continue

        graph.setdefault(friendship.user_id, set()).add(friendship.friend_id)
        graph.setdefault(friendship.friend_id, set()).add(friendship.user_id)

    logger.debug(f"Graph built with {len(graph)} users")
    return graph


def friends_of(graph: Optional[SocialGraph], user_id: str) -> Set[str]:
    """그래프에 없는 사용자는 빈 친구 집합으로 취급"""
    if not graph:
        return set()
    return graph.get(user_id, set())


def mutual_friend_count(graph: Optional[SocialGraph], user_a: str, user_b: str) -> int:
    """
    두 사용자가 공유하는 직접 친구의 수를 계산하는 함수

    Args:
        graph: 소셜 그래프
        user_a: 첫 번째 사용자 ID
        user_b: 두 번째 사용자 ID

    Returns:
        공통 친구 수
    """
    return len(friends_of(graph, user_a) & friends_of(graph, user_b))


def friendship_status(
    friendships: Optional[Iterable[Friendship]],
    user_a: str,
    user_b: str,
) -> Optional[str]:
    """
    두 사용자 사이 친구 관계의 상태를 조회하는 함수

    간선은 방향을 가지고 저장되므로 양방향 모두 확인합니다.

    Returns:
        pending, accepted, declined 중 하나 (관계가 없으면 None)
    """
    for friendship in friendships or []:
        if (friendship.user_id, friendship.friend_id) in ((user_a, user_b), (user_b, user_a)):
            return friendship.status
    return None
