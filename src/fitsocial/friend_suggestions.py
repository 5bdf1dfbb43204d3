"""친구 추천 모듈: 소셜 그래프와 관심사를 결합하여 "알 수도 있는 사람"을 추천하는 모듈

이 모듈은 다음 네 가지 방식의 추천을 제공합니다:
- 단일 홉: 친구의 친구를 공통 친구 수로 정렬
- 다중 홉: 너비 우선 탐색(BFS)으로 2~3단계 떨어진 사용자 탐색
- 관심사 기반: 관심사 집합 간 Jaccard 유사도
- 하이브리드: 단일 홉 점수와 관심사 점수의 가중 결합
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Iterable, List, Mapping, Optional, Set

from .data_models import HybridSuggestion, InterestSuggestion, Suggestion
from .social_graph import SocialGraph, friends_of

logger = logging.getLogger(__name__)

# 하이브리드 추천의 기본 가중치 (공통 친구 60%, 관심사 40%)
DEFAULT_HYBRID_WEIGHTS = {"mutual": 0.6, "interest": 0.4}

# 관심사 기반 추천에 포함되기 위한 최소 유사도 (초과해야 포함)
MIN_INTEREST_SIMILARITY = 0.1

# 결과 개수 제한
MAX_INTEREST_SUGGESTIONS = 10
HYBRID_MUTUAL_POOL = 20
MAX_HYBRID_SUGGESTIONS = 15

# 친구 수에 따른 보정 기준
FEW_FRIENDS_THRESHOLD = 10     # 이보다 적으면 수락 가능성이 높다고 보고 가산
MANY_FRIENDS_THRESHOLD = 100   # 이보다 많으면 응답 가능성이 낮다고 보고 감산


def jaccard_similarity(first: Iterable[str], second: Iterable[str]) -> float:
    """
    두 집합의 Jaccard 유사도를 계산하는 함수

    |교집합| / |합집합| 을 반환하며, 두 집합이 모두 비어
    합집합 크기가 0이면 0.0을 반환합니다.

    Args:
        first: 첫 번째 관심사 모음
        second: 두 번째 관심사 모음

    Returns:
        0.0 ~ 1.0 범위의 유사도
    """
    first_set, second_set = set(first or ()), set(second or ())
    union = first_set | second_set
    if not union:
        return 0.0
    return len(first_set & second_set) / len(union)


class FriendSuggestionRanker:
    """
    친구 추천 랭커 클래스: 소셜 그래프 위에서 추천 후보를 찾고 점수를 매김

    요청마다 새로 만든 그래프로 생성하며, 그래프 외의 내부 상태나
    캐시는 두지 않습니다.
    """

    def __init__(self, graph: Optional[SocialGraph]) -> None:
        self.graph: SocialGraph = graph or {}

    def suggest_friends(self, target_user_id: str, max_suggestions: int = 10) -> List[Suggestion]:
        """
        친구의 친구를 공통 친구 수 기준으로 추천하는 함수

        대상 사용자의 각 친구를 거쳐 도달하는 사용자마다 공통 친구 수를
        누적하고, 공통 친구가 많은 순서로 정렬합니다.
        대상 사용자 본인과 이미 친구인 사용자는 제외합니다.

        Args:
            target_user_id: 추천을 받을 사용자 ID
            max_suggestions: 최대 추천 개수 (기본 10명)

        Returns:
            공통 친구 수 내림차순으로 정렬된 추천 목록
        """
        target_friends = friends_of(self.graph, target_user_id)
        if not target_friends:
            logger.debug(f"No friends found for {target_user_id}, cannot generate suggestions")
            return []

        # 후보 사용자 -> 공통 친구 수
        mutual_counts: Dict[str, int] = {}
        for friend_id in target_friends:
            for candidate in friends_of(self.graph, friend_id):
                if candidate == target_user_id or candidate in target_friends:
                    continue
                mutual_counts[candidate] = mutual_counts.get(candidate, 0) + 1

        ranked = sorted(mutual_counts.items(), key=lambda item: item[1], reverse=True)
        suggestions = [
            Suggestion(
                user_id=user_id,
                mutual_friends=mutual_count,
                score=self._suggestion_score(user_id, mutual_count),
            )
            for user_id, mutual_count in ranked[:max_suggestions]
        ]

        logger.info(f"Generated {len(suggestions)} suggestions for {target_user_id}")
        return suggestions

    def suggest_friends_multi_hop(
        self,
        target_user_id: str,
        max_hops: int = 2,
        max_suggestions: int = 15,
    ) -> List[Suggestion]:
        """
        너비 우선 탐색으로 여러 단계 떨어진 사용자를 추천하는 함수

        FIFO 큐를 사용하므로 각 사용자에 처음 기록되는 깊이가 곧
        최단 홉 거리입니다. 깊이가 1 이상인 노드에서 처음 발견된 사용자만
        후보가 되므로 대상 본인과 직접 친구는 추천되지 않습니다.

        공통 친구 수는 발견 시 1로 시작하여, 같거나 더 얕은 깊이의 노드에서
        다시 도달할 때마다 1씩 늘어나는 근사 카운트입니다.

        Args:
            target_user_id: 추천을 받을 사용자 ID
            max_hops: 탐색할 최대 홉 수 (기본 2)
            max_suggestions: 최대 추천 개수 (기본 15명)

        Returns:
            점수 내림차순으로 정렬된 추천 목록 (hop_distance 포함)
        """
        if not friends_of(self.graph, target_user_id):
            return []

        depths: Dict[str, int] = {target_user_id: 0}
        candidates: Dict[str, Suggestion] = {}
        queue = deque([target_user_id])

        while queue:
            current = queue.popleft()
            depth = depths[current]

            # 최대 홉에 도달한 노드는 더 확장하지 않음
            if depth >= max_hops:
                continue

            for neighbor in friends_of(self.graph, current):
                if neighbor not in depths:
                    depths[neighbor] = depth + 1
                    queue.append(neighbor)
                    if depth > 0:
                        candidates[neighbor] = Suggestion(
                            user_id=neighbor,
                            mutual_friends=1,
                            score=0.0,
                            hop_distance=depth + 1,
                        )
                elif depth > 0 and neighbor in candidates and depths[neighbor] >= depth:
                    candidates[neighbor].mutual_friends += 1

        # 가까울수록, 공통 연결이 많을수록 높은 점수
        for suggestion in candidates.values():
            suggestion.score = suggestion.mutual_friends * 10 - suggestion.hop_distance * 5

        ranked = sorted(candidates.values(), key=lambda item: item.score, reverse=True)
        return ranked[:max_suggestions]

    def suggest_by_interest(
        self,
        target_user_id: str,
        interests_by_user: Optional[Mapping[str, Iterable[str]]],
    ) -> List[InterestSuggestion]:
        """
        관심사 집합의 Jaccard 유사도로 사용자를 추천하는 함수

        Args:
            target_user_id: 추천을 받을 사용자 ID
            interests_by_user: 사용자 ID -> 관심사 모음

        Returns:
            유사도 내림차순 추천 목록 (최대 10명, 유사도 0.1 초과만)
        """
        if not interests_by_user:
            return []

        target_interests: Set[str] = set(interests_by_user.get(target_user_id) or ())
        matches: List[InterestSuggestion] = []

        for user_id, interests in interests_by_user.items():
            if user_id == target_user_id:
                continue
            candidate_interests = set(interests or ())
            similarity = jaccard_similarity(target_interests, candidate_interests)
            if similarity <= MIN_INTEREST_SIMILARITY:
                continue
            matches.append(
                InterestSuggestion(
                    user_id=user_id,
                    similarity=similarity,
                    common_interests=sorted(target_interests & candidate_interests),
                    score=similarity * 100,
                )
            )

        matches.sort(key=lambda item: item.similarity, reverse=True)
        return matches[:MAX_INTEREST_SUGGESTIONS]

    def suggest_hybrid(
        self,
        target_user_id: str,
        interests_by_user: Optional[Mapping[str, Iterable[str]]],
        weights: Optional[Mapping[str, float]] = None,
    ) -> List[HybridSuggestion]:
        """
        공통 친구 추천과 관심사 추천을 가중 결합하는 함수

        단일 홉 상위 20명과 관심사 추천 전체를 사용자 기준으로 합치고,
        한쪽에만 있는 사용자는 다른 쪽 점수를 0으로 둡니다.

        Args:
            target_user_id: 추천을 받을 사용자 ID
            interests_by_user: 사용자 ID -> 관심사 모음
            weights: {"mutual": 가중치, "interest": 가중치} (기본 0.6 / 0.4)

        Returns:
            종합 점수 내림차순 추천 목록 (최대 15명)
        """
        weights = {**DEFAULT_HYBRID_WEIGHTS, **(weights or {})}
        combined: Dict[str, HybridSuggestion] = {}

        for suggestion in self.suggest_friends(target_user_id, HYBRID_MUTUAL_POOL):
            combined[suggestion.user_id] = HybridSuggestion(
                user_id=suggestion.user_id,
                mutual_score=suggestion.score,
                interest_score=0.0,
                total_score=0.0,
            )

        for suggestion in self.suggest_by_interest(target_user_id, interests_by_user):
            entry = combined.setdefault(
                suggestion.user_id,
                HybridSuggestion(
                    user_id=suggestion.user_id,
                    mutual_score=0.0,
                    interest_score=0.0,
                    total_score=0.0,
                ),
            )
            entry.interest_score = suggestion.score

        for entry in combined.values():
            entry.total_score = (
                entry.mutual_score * weights["mutual"]
                + entry.interest_score * weights["interest"]
            )

        ranked = sorted(combined.values(), key=lambda item: item.total_score, reverse=True)
        return ranked[:MAX_HYBRID_SUGGESTIONS]

    def _suggestion_score(self, user_id: str, mutual_count: int) -> float:
        """
        공통 친구 수와 후보의 친구 수로 추천 점수를 계산하는 내부 함수

        - 기본 점수: 공통 친구 1명당 10점
        - 공통 친구 3명 이상이면 제곱 보너스 (mutual^2 * 5)
        - 친구가 10명 미만이면 +20, 100명 초과면 -10
        """
        score = mutual_count * 10
        if mutual_count >= 3:
            score += mutual_count ** 2 * 5

        friend_count = len(friends_of(self.graph, user_id))
        if friend_count < FEW_FRIENDS_THRESHOLD:
            score += 20
        elif friend_count > MANY_FRIENDS_THRESHOLD:
            score -= 10
        return score
