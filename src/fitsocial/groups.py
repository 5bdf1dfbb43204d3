"""그룹 추천 모듈: 친구들이 속한 그룹 중 사용자가 아직 가입하지 않은 그룹을 추천하는 모듈"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from .data_models import Group, GroupSuggestion
from .social_graph import SocialGraph, friends_of


def suggest_groups(
    user_id: str,
    graph: Optional[SocialGraph],
    memberships: Optional[Iterable[Mapping[str, Any]]],
    groups: Optional[Iterable[Group]],
) -> List[GroupSuggestion]:
    """
    친구들이 가입한 그룹을 추천하는 함수

    사용자가 만든 그룹과 이미 가입한 그룹은 제외하며,
    친구 멤버가 많은 그룹, 그 다음으로 전체 멤버가 많은 그룹 순으로 정렬합니다.

    Args:
        user_id: 추천을 받을 사용자 ID
        graph: 소셜 그래프
        memberships: 그룹 멤버 행 (group_id, user_id)
        groups: 그룹 목록

    Returns:
        그룹 추천 목록
    """
    friend_ids = friends_of(graph, user_id)
    if not friend_ids:
        return []

    members: Dict[Any, Set[str]] = defaultdict(set)
    for row in memberships or []:
        members[row.get("group_id")].add(row.get("user_id"))

    suggestions: List[GroupSuggestion] = []
    for group in groups or []:
        group_members = members.get(group.id, set())
        friend_members = len(group_members & friend_ids)
        if not friend_members:
            continue
        if group.created_by == user_id or user_id in group_members:
            continue
        suggestions.append(
            GroupSuggestion(
                group=group,
                member_count=len(group_members),
                friend_members=friend_members,
            )
        )

    suggestions.sort(key=lambda s: (s.friend_members, s.member_count), reverse=True)
    return suggestions
