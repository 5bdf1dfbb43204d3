"""
커뮤니티 서비스 모듈: 저장소에서 원본 데이터를 가져와 랭킹/추천 엔진에 넘기는 애플리케이션 계층

이 모듈은 다음 흐름을 담당합니다:
1. 저장소에서 필요한 테이블을 일괄 조회 (실패 시 로그를 남기고 빈 목록으로 대체)
2. 조회한 행을 그래프, 피드 항목, 관심도 벡터 등 메모리 구조로 변환
3. 각 엔진으로 점수를 계산하고 정렬된 결과를 화면 계층에 반환

랭킹 엔진은 조회 실패를 직접 다루지 않으며, 최악의 경우에도
빈 목록이나 덜 개인화된 결과를 돌려줍니다.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple, TYPE_CHECKING

from .challenges import ChallengeRecommender, challenge_leaderboard
from .data_models import (
    Challenge,
    ChallengeRecommendation,
    FeedItem,
    Friendship,
    FRIENDSHIP_ACCEPTED,
    GroupSuggestion,
    Group,
    LeaderboardEntry,
    Profile,
    parse_timestamp,
)
from .feed import FeedScorer, build_feed_items, group_by
from .friend_suggestions import FriendSuggestionRanker
from .groups import suggest_groups
from .interests import RECENT_HISTORY_LIMIT, derive_interest_vector
from .profile_matching import suggest_compatible_profiles
from .social_graph import SocialGraph, build_graph, friends_of
from .store import InMemoryStore, StoreError

if TYPE_CHECKING:
    from .openai_scorer import OpenAIZeroShotScorer

logger = logging.getLogger(__name__)

SUGGESTION_MODES = ("mutual", "multi_hop", "hybrid")


class CommunityService:
    """
    커뮤니티 서비스 클래스: 저장소 조회와 랭킹 엔진 호출을 연결

    엔진 객체는 호출마다 새로 생성하므로 요청 간에 공유되는 상태가 없습니다.
    """

    def __init__(
        self,
        store: InMemoryStore,
        zero_shot_scorer: OpenAIZeroShotScorer | None = None,
    ) -> None:
        self.store = store
        self.zero_shot_scorer = zero_shot_scorer

    # ------------------------------------------------------------------
    # 친구 / 그래프
    # ------------------------------------------------------------------

    def social_graph(self) -> SocialGraph:
        rows = self._select("friends", eq={"status": FRIENDSHIP_ACCEPTED})
        return build_graph(Friendship.from_row(row) for row in rows)

    def friend_suggestions(self, user_id: str, mode: str = "mutual") -> List[Any]:
        """
        모드에 따라 친구 추천 목록을 생성하는 함수

        Args:
            user_id: 추천을 받을 사용자 ID
            mode: mutual (단일 홉), multi_hop (BFS), hybrid (공통 친구 + 관심사)

        Returns:
            모드별 추천 결과 목록

        Raises:
            ValueError: 지원하지 않는 모드
        """
        if mode not in SUGGESTION_MODES:
            raise ValueError(f"Unknown suggestion mode: {mode}")

        graph = self.social_graph()
        ranker = FriendSuggestionRanker(graph)
        if mode == "mutual":
            return ranker.suggest_friends(user_id)
        if mode == "multi_hop":
            return ranker.suggest_friends_multi_hop(user_id)

        # 이미 친구인 사용자는 관심사 후보에서 제외
        friend_ids = friends_of(graph, user_id)
        interests = {
            other: labels for other, labels in self.interest_sets().items()
            if other not in friend_ids
        }
        return ranker.suggest_hybrid(user_id, interests)

    def interest_sets(self) -> Dict[str, Set[str]]:
        """
        사용자별 관심사 집합을 구성하는 함수

        운동 이름, 명상 세션 종류, 개인 기록 종목, 러닝 여부, 프로필의 운동 목표를
        소문자 라벨로 모읍니다.
        """
        interests: Dict[str, Set[str]] = {}

        def add(user: Optional[str], label: Any) -> None:
            if user and label:
                interests.setdefault(user, set()).add(str(label).strip().lower())

        for row in self._select("profiles"):
            add(row.get("id"), row.get("fitness_goal"))
        for row in self._select("user_workout_logs"):
            add(row.get("user_id"), row.get("workout_name"))
        for row in self._select("mental_session_logs"):
            add(row.get("profile_id"), row.get("session_type"))
        for row in self._select("personal_records"):
            add(row.get("profile_id"), row.get("exercise"))
        for row in self._select("runs"):
            add(row.get("user_id"), "running")

        return interests

    def compatible_profiles(self, user_id: str) -> List[Tuple[Profile, int]]:
        """프로필 호환성 기준 친구 후보 (이미 요청을 보낸 사용자 제외)"""
        current_rows = self._select("profiles", eq={"id": user_id}, limit=1)
        if not current_rows:
            return []
        current = Profile.from_row(current_rows[0])

        existing = [row.get("friend_id") for row in self._select("friends", eq={"user_id": user_id})]
        profiles = [Profile.from_row(row) for row in self._select("profiles")]
        return suggest_compatible_profiles(current, profiles, existing)

    def suggested_groups(self, user_id: str) -> List[GroupSuggestion]:
        groups = [Group.from_row(row) for row in self._select("groups")]
        return suggest_groups(user_id, self.social_graph(), self._select("group_members"), groups)

    # ------------------------------------------------------------------
    # 피드
    # ------------------------------------------------------------------

    def fetch_feed(
        self,
        viewer_id: str,
        limit: int = 50,
        now: Optional[datetime] = None,
    ) -> List[FeedItem]:
        """
        보는 사람과 수락된 친구들의 활동으로 랭킹된 피드를 만드는 함수

        Args:
            viewer_id: 피드를 보는 사용자 ID
            limit: 최대 항목 수 (기본 50개)
            now: 기준 시각 (None이면 현재 UTC 시각)

        Returns:
            점수 내림차순 피드 항목 목록
        """
        author_ids = friends_of(self.social_graph(), viewer_id) | {viewer_id}

        workouts = self._select("user_workout_logs", in_={"user_id": author_ids})
        mentals = self._select("mental_session_logs", in_={"profile_id": author_ids})
        prs = self._select("personal_records", in_={"profile_id": author_ids})
        runs = self._select("runs", in_={"user_id": author_ids})

        workout_ids = [row["id"] for row in workouts]
        session_ids = [row["id"] for row in mentals]
        run_ids = [row["id"] for row in runs]

        kudos_by_item: Dict[Any, List[Dict[str, Any]]] = {}
        comments_by_item: Dict[Any, List[Dict[str, Any]]] = {}
        for table, key, ids, target in (
            ("workout_kudos", "workout_id", workout_ids, kudos_by_item),
            ("mental_session_kudos", "session_id", session_ids, kudos_by_item),
            ("run_kudos", "run_id", run_ids, kudos_by_item),
            ("workout_comments", "workout_id", workout_ids, comments_by_item),
            ("mental_session_comments", "session_id", session_ids, comments_by_item),
            ("run_comments", "run_id", run_ids, comments_by_item),
        ):
            for item_id, rows in group_by(self._select(table, in_={key: ids}), key).items():
                target.setdefault(item_id, []).extend(rows)

        items = build_feed_items(workouts, mentals, prs, runs, kudos_by_item, comments_by_item)
        return FeedScorer().rank_feed(items, viewer_id, limit=limit, now=now)

    # ------------------------------------------------------------------
    # 관심도 / 챌린지
    # ------------------------------------------------------------------

    def analyze_user_interests(self, user_id: str) -> Dict[str, float]:
        """
        사용자의 최근 활동 이력으로 관심도 벡터를 계산하는 함수

        각 원본 테이블에서 최근 50건씩 조회하고, 챌린지 참여 행에는
        해당 챌린지 정보를 challenges 키로 붙입니다.
        """
        recent = {"descending": True, "limit": RECENT_HISTORY_LIMIT}
        workouts = self._select("user_workout_logs", eq={"user_id": user_id}, order_by="completed_at", **recent)
        mentals = self._select("mental_session_logs", eq={"profile_id": user_id}, order_by="completed_at", **recent)
        runs = self._select("runs", eq={"user_id": user_id}, order_by="start_time", **recent)
        prs = self._select("personal_records", eq={"profile_id": user_id}, order_by="created_at", **recent)
        history = self._select("challenge_participants", eq={"user_id": user_id}, order_by="joined_at", **recent)

        if history:
            challenge_ids = [row.get("challenge_id") for row in history]
            challenges = {row["id"]: row for row in self._select("challenges", in_={"id": challenge_ids})}
            for row in history:
                row["challenges"] = challenges.get(row.get("challenge_id"))

        return derive_interest_vector(workouts, mentals, runs, prs, history)

    def recommend_challenges(
        self,
        user_id: str,
        limit: int = 10,
        now: Optional[datetime] = None,
    ) -> List[ChallengeRecommendation]:
        """
        진행 중이고 아직 참여하지 않은 챌린지 중에서 추천 목록을 생성하는 함수

        Args:
            user_id: 추천을 받을 사용자 ID
            limit: 최대 추천 개수 (기본 10개)
            now: 기준 시각 (None이면 현재 UTC 시각)

        Returns:
            점수 내림차순 챌린지 추천 목록
        """
        now = parse_timestamp(now) or datetime.now(timezone.utc)
        interests = self.analyze_user_interests(user_id)

        challenges = [
            Challenge.from_row(row)
            for row in self._select("challenges", eq={"is_active": True}, order_by="created_at", descending=True)
        ]
        challenges = [c for c in challenges if c.end_date is not None and c.end_date >= now]
        if not challenges:
            return []

        participants = self._select("challenge_participants", in_={"challenge_id": [c.id for c in challenges]})
        participant_counts = Counter(row.get("challenge_id") for row in participants)
        joined = {row.get("challenge_id") for row in participants if row.get("user_id") == user_id}

        recommender = ChallengeRecommender(zero_shot_scorer=self.zero_shot_scorer)
        return recommender.recommend(
            user_id,
            interests,
            challenges,
            limit=limit,
            participant_counts=participant_counts,
            joined_challenge_ids=joined,
            now=now,
        )

    def user_challenges(self, user_id: str) -> List[Tuple[Challenge, float]]:
        """사용자가 참여 중인 미완료 챌린지와 진행도 (최근 참여순)"""
        participations = self._select(
            "challenge_participants",
            eq={"user_id": user_id, "completed": False},
            order_by="joined_at",
            descending=True,
        )
        ids = [row.get("challenge_id") for row in participations]
        challenges = {row["id"]: Challenge.from_row(row) for row in self._select("challenges", in_={"id": ids})}
        return [
            (challenges[row.get("challenge_id")], row.get("progress") or 0)
            for row in participations
            if row.get("challenge_id") in challenges
        ]

    def challenge_leaderboard(self, challenge_id: str, limit: int = 20) -> List[LeaderboardEntry]:
        participations = self._select("challenge_participants", eq={"challenge_id": challenge_id})
        user_ids = [row.get("user_id") for row in participations]
        profiles = {row["id"]: Profile.from_row(row) for row in self._select("profiles", in_={"id": user_ids})}
        return challenge_leaderboard(participations, profiles, limit=limit)

    def update_progress(
        self,
        user_id: str,
        challenge_id: str,
        progress: float,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        챌린지 진행도를 갱신하고 진행 로그를 남기는 함수

        Returns:
            성공하면 True, 저장소 오류가 나면 False
        """
        now = now or datetime.now(timezone.utc)
        try:
            self.store.update(
                "challenge_participants",
                {"progress": progress, "updated_at": now},
                eq={"user_id": user_id, "challenge_id": challenge_id},
            )
            self.store.insert(
                "challenge_progress_logs",
                {"user_id": user_id, "challenge_id": challenge_id, "progress": progress, "logged_at": now},
            )
        except StoreError as exc:
            logger.error(f"Error updating challenge progress: {exc}")
            return False
        return True

    # ------------------------------------------------------------------

    def _select(self, table: str, **query: Any) -> List[Dict[str, Any]]:
        """저장소 조회 실패는 로그를 남기고 빈 목록으로 대체"""
        try:
            return self.store.select(table, **query)
        except StoreError as exc:
            logger.error(f"Error fetching {table}: {exc}")
            return []
