"""프로필 호환성 모듈: 운동 목표, 훈련 수준, 나이 등 프로필 정보로 친구 후보를 정렬하는 모듈"""
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .data_models import Profile

# 호환성 점수 항목별 가산점
SAME_GOAL_POINTS = 30
SAME_LEVEL_POINTS = 25
CLOSE_AGE_POINTS = 20    # 나이 차이 5살 이하
NEAR_AGE_POINTS = 10     # 나이 차이 10살 이하
HAS_BIO_POINTS = 5


def compatibility_score(candidate: Profile, current: Profile) -> int:
    """
    두 프로필의 호환성 점수를 계산하는 함수

    운동 목표와 훈련 수준은 양쪽 모두 값이 있을 때만 일치로 봅니다.
    나이가 비어 있으면 0으로 계산합니다.

    Args:
        candidate: 추천 후보 프로필
        current: 현재 사용자 프로필

    Returns:
        호환성 점수 (0 ~ 80)
    """
    score = 0

    if candidate.fitness_goal and candidate.fitness_goal == current.fitness_goal:
        score += SAME_GOAL_POINTS

    if candidate.training_level and candidate.training_level == current.training_level:
        score += SAME_LEVEL_POINTS

    age_gap = abs((candidate.age or 0) - (current.age or 0))
    if age_gap <= 5:
        score += CLOSE_AGE_POINTS
    elif age_gap <= 10:
        score += NEAR_AGE_POINTS

    # 자기소개가 있으면 활동적인 사용자로 간주
    if candidate.bio:
        score += HAS_BIO_POINTS

    return score


def suggest_compatible_profiles(
    current: Profile,
    profiles: Optional[Iterable[Profile]],
    existing_friend_ids: Optional[Iterable[str]] = None,
) -> List[Tuple[Profile, int]]:
    """
    현재 사용자와 호환성이 높은 프로필 순으로 후보를 정렬하는 함수

    Args:
        current: 현재 사용자 프로필
        profiles: 전체 후보 프로필 목록
        existing_friend_ids: 이미 친구(또는 요청 중)인 사용자 ID 목록

    Returns:
        (프로필, 점수) 목록, 점수 내림차순
    """
    excluded = set(existing_friend_ids or ())
    excluded.add(current.id)

    scored = [
        (profile, compatibility_score(profile, current))
        for profile in profiles or []
        if profile.id not in excluded
    ]
    return sorted(scored, key=lambda item: item[1], reverse=True)
