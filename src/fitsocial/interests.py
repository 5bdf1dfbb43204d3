"""
관심사 분석 모듈: 사용자의 최근 활동 이력에서 카테고리별 관심도 벡터를 추출하는 모듈

이 모듈은 운동 기록, 명상 세션, 러닝, 개인 기록, 챌린지 참여 이력을 분석하여
카테고리(workout, mental, run, nutrition, sleep, social, learning, creativity)별
0~100 범위의 관심도 점수를 계산합니다.

계산된 벡터는 챌린지 추천 점수의 관심도 요인과 난이도 적합도 요인에 사용됩니다.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .data_models import parse_timestamp

logger = logging.getLogger(__name__)

INTEREST_CATEGORIES = (
    "workout",
    "mental",
    "run",
    "nutrition",
    "sleep",
    "social",
    "learning",
    "creativity",
)

# 활동 이력이 전혀 없는 신규 사용자의 기본 관심도
DEFAULT_INTERESTS = {
    "workout": 50,
    "mental": 30,
    "run": 40,
    "nutrition": 25,
    "sleep": 20,
    "social": 35,
    "learning": 30,
    "creativity": 25,
}

# 카테고리별로 분석할 최근 기록 수
RECENT_HISTORY_LIMIT = 50

# 기록 1건당 기본 점수 (카테고리 기본 점수는 100을 넘지 않음)
WORKOUT_WEIGHT = 10
MENTAL_WEIGHT = 15
RUN_WEIGHT = 12
PR_WEIGHT = 8

# 근력 운동 판별 키워드와 보너스 (60% 초과 시)
STRENGTH_KEYWORDS = ("strength", "weight", "muscle")
STRENGTH_SHARE = 0.6
STRENGTH_BONUS = 20

# 명상 세션 보너스 (50% 초과 시)
MEDITATION_KEYWORD = "meditation"
MEDITATION_SHARE = 0.5
MEDITATION_BONUS = 25

# 장거리 러너 보너스 (평균 거리 5000m 초과 시)
LONG_RUN_METERS = 5000
LONG_RUN_BONUS = 15

# 챌린지 참여 이력 보너스
CHALLENGE_SUCCESS_RATE = 0.7
CHALLENGE_SUCCESS_BONUS = 20
CHALLENGE_TYPE_BONUS = 5

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def derive_interest_vector(
    workouts: Optional[Iterable[Mapping[str, Any]]] = None,
    mental_sessions: Optional[Iterable[Mapping[str, Any]]] = None,
    runs: Optional[Iterable[Mapping[str, Any]]] = None,
    personal_records: Optional[Iterable[Mapping[str, Any]]] = None,
    challenge_history: Optional[Iterable[Mapping[str, Any]]] = None,
) -> Dict[str, float]:
    """
    사용자의 활동 이력으로 카테고리별 관심도 벡터를 계산하는 함수

    각 카테고리는 최근 50건만 분석합니다. 카테고리 기본 점수는
    min(100, 건수 * 가중치)이고, 여기에 패턴 보너스가 더해집니다.
    보너스로 100을 넘는 중간값은 벡터를 확정할 때 한 번만 [0, 100]으로
    잘라냅니다.

    Args:
        workouts: 운동 기록 행 (description, workout_name, completed_at)
        mental_sessions: 명상 세션 행 (session_type, description, completed_at)
        runs: 러닝 기록 행 (distance_meters, start_time)
        personal_records: 개인 기록 행 (created_at)
        challenge_history: 챌린지 참여 행 (completed, challenges.type, joined_at)

    Returns:
        카테고리 -> 관심도 (0~100) 매핑
    """
    workouts = _most_recent(workouts, "completed_at")
    mental_sessions = _most_recent(mental_sessions, "completed_at")
    runs = _most_recent(runs, "start_time")
    personal_records = _most_recent(personal_records, "created_at")
    challenge_history = _most_recent(challenge_history, "joined_at")

    if not (workouts or mental_sessions or runs or personal_records or challenge_history):
        logger.debug("No activity history, using default interests")
        return dict(DEFAULT_INTERESTS)

    interests: Dict[str, float] = {category: 0.0 for category in INTEREST_CATEGORIES}

    # 운동 패턴: 근력 운동 위주인지 확인
    if workouts:
        interests["workout"] = min(100, len(workouts) * WORKOUT_WEIGHT)
        strength = [w for w in workouts if _mentions(w, ("description", "workout_name"), STRENGTH_KEYWORDS)]
        if len(strength) > len(workouts) * STRENGTH_SHARE:
            interests["workout"] += STRENGTH_BONUS

    # 멘탈 세션 패턴: 명상 위주인지 확인
    if mental_sessions:
        interests["mental"] = min(100, len(mental_sessions) * MENTAL_WEIGHT)
        meditation = [
            m for m in mental_sessions
            if _mentions(m, ("session_type", "description"), (MEDITATION_KEYWORD,))
        ]
        if len(meditation) > len(mental_sessions) * MEDITATION_SHARE:
            interests["mental"] += MEDITATION_BONUS

    # 러닝 패턴: 평균 거리로 장거리 러너인지 확인
    if runs:
        interests["run"] = min(100, len(runs) * RUN_WEIGHT)
        average_distance = sum(_run_distance(r) for r in runs) / len(runs)
        if average_distance > LONG_RUN_METERS:
            interests["run"] += LONG_RUN_BONUS

    # 개인 기록 갱신은 학습 관심도로 반영
    if personal_records:
        interests["learning"] = min(100, len(personal_records) * PR_WEIGHT)

    if challenge_history:
        _apply_challenge_history(interests, challenge_history)

    return {key: min(100.0, max(0.0, float(value))) for key, value in interests.items()}


def _apply_challenge_history(interests: Dict[str, float], history: List[Mapping[str, Any]]) -> None:
    """
    챌린지 참여 이력을 관심도에 반영하는 내부 함수

    완료율이 70%를 넘으면 social에 보너스를 주고,
    참여한 챌린지 종류마다 해당 카테고리에 건당 5점을 더합니다.
    """
    completed = [entry for entry in history if entry.get("completed")]
    if len(completed) / len(history) > CHALLENGE_SUCCESS_RATE:
        interests["social"] += CHALLENGE_SUCCESS_BONUS

    for entry in history:
        challenge = entry.get("challenges") or {}
        challenge_type = challenge.get("type")
        if challenge_type in interests:
            interests[challenge_type] += CHALLENGE_TYPE_BONUS


def _most_recent(rows: Optional[Iterable[Mapping[str, Any]]], date_field: str) -> List[Mapping[str, Any]]:
    """날짜 필드 기준 최신순 상위 50건 (날짜 없는 행은 맨 뒤)"""
    ordered = sorted(
        rows or [],
        key=lambda row: parse_timestamp(row.get(date_field)) or _EPOCH,
        reverse=True,
    )
    return ordered[:RECENT_HISTORY_LIMIT]


def _mentions(row: Mapping[str, Any], fields: Iterable[str], keywords: Iterable[str]) -> bool:
    text = " ".join(str(row.get(name) or "") for name in fields).lower()
    return any(keyword in text for keyword in keywords)


def _run_distance(row: Mapping[str, Any]) -> float:
    distance = row.get("distance_meters")
    if distance is None:
        distance = row.get("distance")
    return float(distance or 0)
