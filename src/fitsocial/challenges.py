"""챌린지 추천 모듈: 다중 요인을 결합하여 사용자에게 맞는 챌린지를 추천하는 모듈

이 모듈은 다음 요인들을 가중 합산하여 추천 점수를 계산합니다:
- 관심도: 사용자 관심도 벡터에서 챌린지 종류의 점수
- 난이도 적합도: 사용자 평균 관심도와 챌린지 난이도의 차이
- 시간 긴급도: 종료일까지 남은 일수
- 사회적 증거: 참여자 수
- 보상: 보상 포인트 크기
- LLM 신호: 관심도 이력이 없는 종류에 대해 LLM이 계산하는 보너스 (선택)

추천 외에 인기 챌린지, 종류별 목록, 리더보드, 진행률 계산도 제공합니다.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, TYPE_CHECKING

from .data_models import Challenge, ChallengeRecommendation, LeaderboardEntry, Profile, parse_timestamp

if TYPE_CHECKING:
    from .openai_scorer import OpenAIZeroShotScorer

logger = logging.getLogger(__name__)

# 요인별 가중치
WEIGHTS = {
    "interest": 0.40,    # 관심도 40%
    "difficulty": 0.20,  # 난이도 적합도 20%
    "time": 0.15,        # 시간 긴급도 15%
    "social": 0.15,      # 사회적 증거 15%
    "reward": 0.10,      # 보상 10%
}

# 난이도 -> 수치 (목록에 없는 난이도는 medium으로 간주)
DIFFICULTY_LEVELS = {
    "easy": 30,
    "medium": 50,
    "hard": 70,
    "expert": 90,
}
DEFAULT_DIFFICULTY_LEVEL = DIFFICULTY_LEVELS["medium"]

# 남은 일수 상한 -> 긴급도 점수 (위에서부터 처음 만족하는 구간 적용)
TIME_BONUS_STEPS = (
    (1, 30),    # 하루 이내
    (3, 20),    # 3일 이내
    (7, 10),    # 이번 주
    (14, 5),    # 2주 이내
)
EXPIRED_PENALTY = -50

# 참여자 1명당 5점, 최대 25점
PARTICIPANT_POINTS = 5
MAX_SOCIAL_SCORE = 25

# 관심도 이력이 없는 챌린지에 대한 LLM 점수 가중치 (0~1 점수에 곱함)
ZERO_SHOT_LLM_WEIGHT = 20.0

SECONDS_PER_DAY = 86400.0


def difficulty_bonus(difficulty: str, interest_vector: Mapping[str, float]) -> float:
    """
    사용자 수준과 챌린지 난이도의 적합도 점수를 계산하는 함수

    사용자 수준은 관심도 벡터 전체 카테고리의 평균으로 봅니다.
    차이가 10 이하면 최적 구간(+20), 20 이하면 +10,
    그보다 크면 너무 쉽거나 어려운 것으로 보고 -10을 줍니다.

    Args:
        difficulty: easy, medium, hard, expert
        interest_vector: 카테고리별 관심도

    Returns:
        난이도 적합도 점수 (20, 10, -10 중 하나)
    """
    values = list(interest_vector.values()) if interest_vector else []
    user_level = sum(values) / len(values) if values else 0.0
    challenge_level = DIFFICULTY_LEVELS.get(difficulty, DEFAULT_DIFFICULTY_LEVEL)

    gap = abs(user_level - challenge_level)
    if gap <= 10:
        return 20
    if gap <= 20:
        return 10
    return -10


def time_bonus(end_date: Optional[datetime], now: Optional[datetime] = None) -> float:
    """
    종료일까지 남은 기간에 따른 긴급도 점수를 계산하는 함수

    이미 끝난 챌린지는 -50으로 크게 낮추고, 끝이 가까울수록 높은 점수를 줍니다.

    Args:
        end_date: 챌린지 종료 시각 (없으면 긴급도 0)
        now: 기준 시각 (None이면 현재 UTC 시각)

    Returns:
        긴급도 점수
    """
    if end_date is None:
        return 0
    now = parse_timestamp(now) or datetime.now(timezone.utc)
    days_left = (end_date - now).total_seconds() / SECONDS_PER_DAY

    if days_left <= 0:
        return EXPIRED_PENALTY
    for max_days, bonus in TIME_BONUS_STEPS:
        if days_left <= max_days:
            return bonus
    return 0


def social_score(participant_count: int) -> float:
    """참여자 수 기반 사회적 증거 점수 (최대 25점)"""
    return min((participant_count or 0) * PARTICIPANT_POINTS, MAX_SOCIAL_SCORE)


def reward_score(reward_points: float) -> float:
    """보상 포인트 100점당 10점"""
    return (reward_points or 0) / 100 * 10


class ChallengeRecommender:
    """
    챌린지 추천 엔진 클래스

    요청마다 생성하는 상태 없는 서비스 객체입니다.
    제로샷 스코러를 넘기면 관심도 이력이 없는 종류의 챌린지에
    LLM 보너스를 추가로 반영합니다.
    """

    def __init__(self, zero_shot_scorer: OpenAIZeroShotScorer | None = None) -> None:
        self.zero_shot_scorer = zero_shot_scorer

    def recommend(
        self,
        user_id: str,
        interest_vector: Optional[Mapping[str, float]],
        challenges: Optional[Iterable[Challenge]],
        limit: int = 10,
        participant_counts: Optional[Mapping[str, int]] = None,
        joined_challenge_ids: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None,
    ) -> List[ChallengeRecommendation]:
        """
        사용자에게 맞는 챌린지 추천 목록을 생성하는 함수

        Args:
            user_id: 추천을 받을 사용자 ID
            interest_vector: 카테고리별 관심도 벡터
            challenges: 후보 챌린지 목록
            limit: 최대 추천 개수 (기본 10개)
            participant_counts: 챌린지 ID -> 참여자 수
            joined_challenge_ids: 이미 참여 중인 챌린지 ID (제외 대상)
            now: 기준 시각 (None이면 현재 UTC 시각)

        Returns:
            점수 내림차순으로 정렬된 추천 목록 (요인별 원점수 포함)
        """
        interest_vector = interest_vector or {}
        participant_counts = participant_counts or {}
        joined = set(joined_challenge_ids or ())
        now = parse_timestamp(now) or datetime.now(timezone.utc)

        ranked: List[ChallengeRecommendation] = []
        zero_shot_features: List[Dict[str, Any]] = []
        zero_shot_index: Dict[str, int] = {}

        for challenge in challenges or []:
            if challenge.id in joined:
                continue

            breakdown = {
                "interest": float(interest_vector.get(challenge.type, 0) or 0),
                "difficulty": float(difficulty_bonus(challenge.difficulty, interest_vector)),
                "time": float(time_bonus(challenge.end_date, now)),
                "social": float(social_score(participant_counts.get(challenge.id, 0))),
                "reward": float(reward_score(challenge.reward_points)),
            }
            score = sum(breakdown[factor] * weight for factor, weight in WEIGHTS.items())
            ranked.append(ChallengeRecommendation(challenge=challenge, score=score, breakdown=breakdown))

            # 관심도 이력이 없는 종류는 LLM 스코링 대상
            if self.zero_shot_scorer and breakdown["interest"] == 0:
                zero_shot_index[challenge.id] = len(ranked) - 1
                zero_shot_features.append(
                    {
                        "challenge_id": challenge.id,
                        "title": challenge.title,
                        "type": challenge.type,
                        "difficulty": challenge.difficulty,
                        "reasoning_tokens": dict(breakdown),
                    }
                )

        context = {
            "user_id": user_id,
            "interest_scores": dict(interest_vector),
            "reference_time": now.isoformat(),
        }
        self._apply_zero_shot_scores(ranked, zero_shot_features, zero_shot_index, context)

        ranked.sort(key=lambda item: item.score, reverse=True)
        logger.info(f"Scored {len(ranked)} challenges for {user_id}")
        return ranked[:limit]

    def _apply_zero_shot_scores(
        self,
        ranked: List[ChallengeRecommendation],
        zero_shot_features: List[Dict[str, Any]],
        zero_shot_index: Dict[str, int],
        context: Dict[str, Any],
    ) -> None:
        """
        관심도 이력이 없는 챌린지들에 LLM 점수를 적용하는 내부 함수

        Args:
            ranked: 추천 결과 목록 (바로 수정됨)
            zero_shot_features: LLM 입력용 챌린지 특징 데이터
            zero_shot_index: 챌린지 ID에서 추천 목록 인덱스로의 매핑
            context: LLM 판단용 컨텍스트 정보
        """
        if not self.zero_shot_scorer or not zero_shot_features:
            return

        llm_scores = self.zero_shot_scorer.score(context, zero_shot_features)
        for challenge_id, bonus in llm_scores.items():
            idx = zero_shot_index.get(challenge_id)
            if idx is None:
                continue
            recommendation = ranked[idx]
            recommendation.breakdown["llm"] = bonus
            recommendation.score += ZERO_SHOT_LLM_WEIGHT * bonus


def _is_open(challenge: Challenge, now: datetime) -> bool:
    return challenge.is_active and challenge.end_date is not None and challenge.end_date >= now


def trending_challenges(
    challenges: Optional[Iterable[Challenge]],
    participant_counts: Optional[Mapping[str, int]] = None,
    limit: int = 5,
    now: Optional[datetime] = None,
) -> List[Challenge]:
    """진행 중인 챌린지를 참여자 수 내림차순으로 반환"""
    now = parse_timestamp(now) or datetime.now(timezone.utc)
    participant_counts = participant_counts or {}
    open_challenges = [c for c in challenges or [] if _is_open(c, now)]
    open_challenges.sort(key=lambda c: participant_counts.get(c.id, 0), reverse=True)
    return open_challenges[:limit]


def challenges_by_type(
    challenges: Optional[Iterable[Challenge]],
    challenge_type: str,
    limit: int = 10,
    now: Optional[datetime] = None,
) -> List[Challenge]:
    """진행 중인 특정 종류의 챌린지를 최신 생성순으로 반환"""
    now = parse_timestamp(now) or datetime.now(timezone.utc)
    matches = [c for c in challenges or [] if c.type == challenge_type and _is_open(c, now)]
    matches.sort(key=lambda c: c.created_at or now, reverse=True)
    return matches[:limit]


def challenge_leaderboard(
    participations: Optional[Iterable[Mapping[str, Any]]],
    profiles_by_id: Optional[Mapping[str, Profile]] = None,
    limit: int = 20,
) -> List[LeaderboardEntry]:
    """
    챌린지 참여 행으로 리더보드를 만드는 함수

    Args:
        participations: 챌린지 참여 행 (user_id, progress, joined_at)
        profiles_by_id: 사용자 ID -> 프로필
        limit: 최대 순위 수 (기본 20명)

    Returns:
        진행도 내림차순 리더보드 (순위는 1부터)
    """
    profiles_by_id = profiles_by_id or {}
    ordered = sorted(participations or [], key=lambda p: p.get("progress") or 0, reverse=True)
    return [
        LeaderboardEntry(
            rank=index + 1,
            user=profiles_by_id.get(row.get("user_id")),
            progress=row.get("progress") or 0,
            joined_at=parse_timestamp(row.get("joined_at")),
        )
        for index, row in enumerate(ordered[:limit])
    ]


def progress_percent(current: float, target: float) -> float:
    """목표 대비 진행률 (0~100, 목표가 0이면 0)"""
    if not target:
        return 0.0
    return min((current or 0) / target * 100, 100.0)


def progress_status(percent: float) -> str:
    if percent >= 100:
        return "COMPLETED"
    if percent >= 75:
        return "ALMOST DONE"
    if percent >= 50:
        return "HALFWAY"
    return "IN PROGRESS"
