"""피드 랭킹 모듈: 친구들의 활동 기록을 관련도 점수로 정렬하여 소셜 피드를 구성하는 모듈

이 모듈은 다음 기능들을 제공합니다:
- 네 종류의 활동 기록(운동, 명상, 러닝, 개인 기록)을 FeedItem으로 통합
- 최신성, 참여도, 관계 가중치, 콘텐츠 종류를 결합한 게시물 점수 계산
- 우선순위 큐를 이용한 상위 N개 피드 추출
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .data_models import FeedItem, parse_timestamp
from .priority_queue import PriorityQueue

logger = logging.getLogger(__name__)

# 콘텐츠 종류별 점수 배율 (목록에 없는 종류는 1.0)
TYPE_BOOSTS = {
    "pr": 1.5,       # 개인 기록
    "workout": 1.2,  # 운동
    "mental": 1.3,   # 명상/멘탈 세션
    "run": 1.1,      # 러닝
}

# 최신성 점수: 최대 100점에서 1시간마다 2점씩 감소 (50시간 후 0점)
RECENCY_MAX_SCORE = 100.0
RECENCY_DECAY_PER_HOUR = 2.0

# 참여도 점수
KUDOS_POINTS = 10
COMMENT_POINTS = 15

# 보는 사람이 이미 응원(kudos)한 게시물에 주는 고정 가산점
SELF_KUDOS_BONUS = 10

DEFAULT_FEED_LIMIT = 50


class FeedScorer:
    """
    피드 점수 계산기 클래스

    relationship_weights는 작성자별 개인화 가중치를 넣기 위한 자리이며,
    비어 있으면 모든 작성자에게 1.0이 적용됩니다.
    """

    def __init__(self, relationship_weights: Optional[Mapping[str, float]] = None) -> None:
        self.relationship_weights: Dict[str, float] = dict(relationship_weights or {})

    def score_post(
        self,
        post: FeedItem,
        viewer_user_id: str,
        now: Optional[datetime] = None,
    ) -> float:
        """
        게시물 하나의 피드 관련도 점수를 계산하는 함수

        계산 순서:
        1. 최신성: max(0, 100 - 경과시간 * 2)
        2. 참여도: kudos 1개당 10점, 댓글 1개당 15점
        3. 작성자 관계 가중치 곱
        4. 콘텐츠 종류 배율 곱
        5. 보는 사람이 같은 종류의 이 게시물에 kudos를 남겼으면 +10

        Args:
            post: 점수를 계산할 피드 항목
            viewer_user_id: 피드를 보는 사용자 ID
            now: 기준 시각 (None이면 현재 UTC 시각)

        Returns:
            피드 점수 (상한 없음)
        """
        now = parse_timestamp(now) or datetime.now(timezone.utc)

        score = 0.0
        if post.date is not None:
            hours_ago = (now - post.date).total_seconds() / 3600.0
            score = max(0.0, RECENCY_MAX_SCORE - hours_ago * RECENCY_DECAY_PER_HOUR)

        score += len(post.kudos) * KUDOS_POINTS
        score += len(post.comments) * COMMENT_POINTS

        score *= self.relationship_weights.get(post.user_id, 1)
        score *= TYPE_BOOSTS.get(post.type, 1)

        viewer_kudos = any(
            kudo.get("post_type") == post.type and kudo.get("user_id") == viewer_user_id
            for kudo in post.kudos
        )
        if viewer_kudos:
            score += SELF_KUDOS_BONUS

        return score

    def rank_feed(
        self,
        posts: Optional[Iterable[FeedItem]],
        viewer_user_id: str,
        limit: int = DEFAULT_FEED_LIMIT,
        now: Optional[datetime] = None,
    ) -> List[FeedItem]:
        """
        게시물 목록을 점수 순으로 정렬하여 상위 limit개를 반환하는 함수

        기준 시각은 한 번만 구해 모든 게시물에 동일하게 적용합니다.

        Args:
            posts: 후보 피드 항목 목록
            viewer_user_id: 피드를 보는 사용자 ID
            limit: 최대 반환 개수 (기본 50개)
            now: 기준 시각 (None이면 현재 UTC 시각)

        Returns:
            점수 내림차순으로 정렬된 피드 항목 목록
        """
        now = parse_timestamp(now) or datetime.now(timezone.utc)
        queue = PriorityQueue()

        for post in posts or []:
            queue.enqueue(post, self.score_post(post, viewer_user_id, now))

        ranked: List[FeedItem] = []
        while not queue.is_empty() and len(ranked) < limit:
            ranked.append(queue.dequeue())

        logger.debug(f"Ranked {len(ranked)} feed items for {viewer_user_id}")
        return ranked


def group_by(rows: Optional[Iterable[Mapping[str, Any]]], key: str) -> Dict[Any, List[Dict[str, Any]]]:
    """행 목록을 지정한 키 값으로 묶는 함수 (예: workout_id -> kudos 목록)"""
    grouped: Dict[Any, List[Dict[str, Any]]] = defaultdict(list)
    for row in rows or []:
        grouped[row.get(key)].append(dict(row))
    return dict(grouped)


def build_feed_items(
    workouts: Optional[Iterable[Mapping[str, Any]]] = None,
    mental_sessions: Optional[Iterable[Mapping[str, Any]]] = None,
    personal_records: Optional[Iterable[Mapping[str, Any]]] = None,
    runs: Optional[Iterable[Mapping[str, Any]]] = None,
    kudos_by_item: Optional[Mapping[Any, List[Mapping[str, Any]]]] = None,
    comments_by_item: Optional[Mapping[Any, List[Mapping[str, Any]]]] = None,
) -> List[FeedItem]:
    """
    네 종류의 활동 기록 행을 하나의 피드 항목 목록으로 통합하는 함수

    원본 테이블마다 날짜와 작성자 필드 이름이 다르므로 이를 통일합니다.
    개인 기록(PR)에는 kudos와 댓글이 붙지 않습니다.
    kudos 행에 post_type이 없으면 해당 항목의 종류를 채워 넣어,
    점수 계산 시 보는 사람의 kudos 여부를 판별할 수 있게 합니다.

    Args:
        workouts: 운동 기록 행 (completed_at, user_id)
        mental_sessions: 명상 세션 행 (completed_at, profile_id)
        personal_records: 개인 기록 행 (created_at, profile_id)
        runs: 러닝 기록 행 (start_time, user_id)
        kudos_by_item: 항목 ID -> kudos 행 목록
        comments_by_item: 항목 ID -> 댓글 행 목록

    Returns:
        최신순으로 정렬된 피드 항목 목록
    """
    kudos_by_item = kudos_by_item or {}
    comments_by_item = comments_by_item or {}

    # (원본 행 목록, 종류, 날짜 필드, 작성자 필드, 반응 허용 여부)
    sources = (
        (workouts, "workout", "completed_at", "user_id", True),
        (mental_sessions, "mental", "completed_at", "profile_id", True),
        (personal_records, "pr", "created_at", "profile_id", False),
        (runs, "run", "start_time", "user_id", True),
    )

    items: List[FeedItem] = []
    for rows, item_type, date_field, author_field, has_reactions in sources:
        for row in rows or []:
            date = parse_timestamp(row.get(date_field))
            if date is None:
                logger.debug(f"Skipping {item_type} {row.get('id')} without {date_field}")
                continue

            kudos: List[Dict[str, Any]] = []
            comments: List[Dict[str, Any]] = []
            if has_reactions:
                kudos = [
                    {"post_type": item_type, **kudo}
                    for kudo in kudos_by_item.get(row.get("id"), [])
                ]
                comments = [dict(comment) for comment in comments_by_item.get(row.get("id"), [])]

            items.append(
                FeedItem(
                    id=row.get("id"),
                    type=item_type,
                    date=date,
                    user_id=row.get(author_field),
                    kudos=kudos,
                    comments=comments,
                    details=dict(row),
                )
            )

    items.sort(key=lambda item: item.date, reverse=True)
    return items
