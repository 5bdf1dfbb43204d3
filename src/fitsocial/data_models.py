"""
데이터 모델 정의 모듈: 소셜 피드 랭킹과 추천 시스템에서 사용되는 핵심 데이터 구조들

이 모듈은 다음 데이터 클래스들을 정의합니다:
- Friendship: 사용자 간 친구 관계 간선
- Suggestion / InterestSuggestion / HybridSuggestion: 친구 추천 결과
- FeedItem: 피드에 노출되는 통합 활동 항목 (운동, 명상, 러닝, 개인 기록)
- Challenge / ChallengeRecommendation: 챌린지와 추천 점수
- Profile, Group, GroupSuggestion, LeaderboardEntry: 보조 화면용 데이터

모든 객체는 요청마다 새로 만들어지고 요청이 끝나면 버려집니다.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

# 친구 관계 상태 값
FRIENDSHIP_PENDING = "pending"
FRIENDSHIP_ACCEPTED = "accepted"
FRIENDSHIP_DECLINED = "declined"

_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    저장소 행의 시간 값을 timezone-aware datetime으로 변환하는 함수

    원격 저장소는 ISO-8601 문자열(끝에 "Z"가 붙거나 소수 초 자릿수가
    6자리가 아닌 경우도 있음)을 돌려주고, 데모 데이터는 datetime 객체를
    그대로 사용합니다. 타임존 정보가 없는 값은 UTC로 간주합니다.

    Args:
        value: datetime, ISO-8601 문자열 또는 None

    Returns:
        UTC 기준 datetime (변환할 수 없으면 None)
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # 소수 초는 fromisoformat이 받는 6자리로 맞춤
        text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Unparseable timestamp ignored: {value!r}")
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Friendship:
    """
    친구 관계 간선을 나타내는 데이터 클래스

    저장소에는 요청을 보낸 쪽(user_id) 기준의 방향 간선으로 저장되지만,
    수락(accepted)된 이후에는 무방향 관계로 취급합니다.
    """
    user_id: str    # 요청을 보낸 사용자
    friend_id: str  # 요청을 받은 사용자
    status: str     # pending, accepted, declined 중 하나

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Friendship":
        return cls(
            user_id=row.get("user_id"),
            friend_id=row.get("friend_id"),
            status=row.get("status", FRIENDSHIP_PENDING),
        )


@dataclass
class Suggestion:
    """
    친구-의-친구 기반 추천 결과

    hop_distance는 다중 홉 탐색에서만 채워집니다.
    """
    user_id: str
    mutual_friends: int
    score: float
    hop_distance: Optional[int] = None


@dataclass
class InterestSuggestion:
    """관심사(Jaccard 유사도) 기반 추천 결과"""
    user_id: str
    similarity: float            # 0.0 ~ 1.0
    common_interests: List[str]  # 공통 관심사 (정렬됨)
    score: float                 # similarity * 100


@dataclass
class HybridSuggestion:
    """공통 친구 점수와 관심사 점수를 가중 결합한 추천 결과"""
    user_id: str
    mutual_score: float
    interest_score: float
    total_score: float


@dataclass
class FeedItem:
    """
    피드에 노출되는 통합 활동 항목

    운동 기록, 명상 세션, 러닝, 개인 기록(PR) 네 종류의 원본 행을
    공통 형태로 통일한 것입니다. 종류별 고유 필드(시간, 거리, 무게 등)는
    details에 그대로 담겨 화면 계층으로 전달됩니다.
    """
    id: str
    type: str                    # workout, mental, run, pr
    date: datetime               # 활동 시각
    user_id: str                 # 작성자
    kudos: List[Dict[str, Any]] = field(default_factory=list)
    comments: List[Dict[str, Any]] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # 직접 만든 항목도 naive 시각이면 UTC로 간주
        self.date = parse_timestamp(self.date)


@dataclass(frozen=True)
class Challenge:
    """
    기간이 정해진 챌린지 정보

    추천 점수 계산의 읽기 전용 입력입니다.
    """
    id: str
    type: str            # workout, mental, run, nutrition, sleep, social, learning, creativity
    difficulty: str      # easy, medium, hard, expert
    target: float        # 목표 수치
    unit: str            # 목표 단위 (예: workouts, km, minutes)
    reward_points: float
    end_date: Optional[datetime]
    created_at: Optional[datetime]
    title: str = ""
    description: str = ""
    is_active: bool = True

    def __post_init__(self) -> None:
        for name in ("end_date", "created_at"):
            object.__setattr__(self, name, parse_timestamp(getattr(self, name)))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Challenge":
        return cls(
            id=row["id"],
            type=row.get("type", ""),
            difficulty=row.get("difficulty", "medium"),
            target=row.get("target") or 0,
            unit=row.get("unit", ""),
            reward_points=row.get("reward_points") or 0,
            end_date=parse_timestamp(row.get("end_date")),
            created_at=parse_timestamp(row.get("created_at")),
            title=row.get("title", ""),
            description=row.get("description", ""),
            is_active=row.get("is_active", True),
        )


@dataclass
class ChallengeRecommendation:
    """
    챌린지 추천 결과와 점수 구성

    breakdown에는 가중치를 곱하기 전의 요인별 원점수
    (interest, difficulty, time, social, reward, 선택적으로 llm)가 담깁니다.
    """
    challenge: Challenge
    score: float
    breakdown: Dict[str, float]


@dataclass(frozen=True)
class Profile:
    """사용자 프로필 (추천 카드 및 호환성 점수 계산용)"""
    id: str
    username: str
    full_name: str = ""
    fitness_goal: Optional[str] = None
    training_level: Optional[str] = None
    age: Optional[int] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    is_premium: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Profile":
        return cls(
            id=row["id"],
            username=row.get("username", ""),
            full_name=row.get("full_name") or "",
            fitness_goal=row.get("fitness_goal"),
            training_level=row.get("training_level"),
            age=row.get("age"),
            bio=row.get("bio"),
            avatar_url=row.get("avatar_url"),
            is_premium=bool(row.get("is_premium", False)),
        )


@dataclass(frozen=True)
class Group:
    """커뮤니티 그룹"""
    id: str
    name: str
    created_by: Optional[str] = None
    is_private: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Group":
        return cls(
            id=row["id"],
            name=row.get("name", ""),
            created_by=row.get("created_by"),
            is_private=bool(row.get("is_private", False)),
        )


@dataclass
class GroupSuggestion:
    """친구들이 속한 그룹 추천 결과"""
    group: Group
    member_count: int    # 전체 멤버 수
    friend_members: int  # 그 중 친구 수


@dataclass
class LeaderboardEntry:
    """챌린지 리더보드의 한 줄"""
    rank: int
    user: Optional[Profile]
    progress: float
    joined_at: Optional[datetime]
