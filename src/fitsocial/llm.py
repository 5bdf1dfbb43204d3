"""추천 설명 모듈: 점수 구성 요소를 바탕으로 사용자용 추천 문구를 만드는 모듈 (템플릿 기반)"""
from __future__ import annotations

import logging
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .data_models import ChallengeRecommendation, Suggestion

logger = logging.getLogger(__name__)

# 챌린지 요인별 설명 문구와 노출 기준 (원점수가 기준 이상일 때 사용)
CHALLENGE_REASON_LABELS = {
    "interest": ("matches the activities you log most", 50),
    "difficulty": ("fits your current level", 20),
    "time": ("ends soon", 20),
    "social": ("is popular with other members", 10),
    "reward": ("offers a solid reward", 10),
    "llm": ("could be a fresh direction for you", 0.6),
}

# 기본 영어 설명
DEFAULT_CHALLENGE_REASON = "good chance to try something new"

# 영어 설명 템플릿
CHALLENGE_TEMPLATE = "Try {title}. Reason: {reasons}."


def mutual_friends_label(count: int) -> str:
    """공통 친구 수 문구 (예: "1 mutual friend", "3 mutual friends")"""
    return f"{count} mutual friend{'' if count == 1 else 's'}"


class ExplanationGenerator:
    """
    추천 설명 생성기 클래스 (템플릿 기반)

    점수 구성 요소(breakdown)를 기반으로 사용자 친화적인 추천 설명을 생성합니다.
    """

    def build_challenge_message(self, recommendation: ChallengeRecommendation) -> str:
        """
        챌린지 추천 결과에 대한 설명 메시지 생성

        Args:
            recommendation: 점수가 계산된 챌린지 추천 결과

        Returns:
            사용자 친화적인 추천 설명 문자열
        """
        challenge = recommendation.challenge
        scores = recommendation.breakdown
        picked: List[str] = []

        # 기준 이상의 점수를 가진 요인만 선별
        for key, (label, threshold) in CHALLENGE_REASON_LABELS.items():
            if scores.get(key, 0.0) >= threshold:
                picked.append(label)

        if not picked:
            logger.debug(f"No factor above threshold for {challenge.id}, using default reason")
            picked.append(DEFAULT_CHALLENGE_REASON)

        title = challenge.title or f"the {challenge.type} challenge"
        return CHALLENGE_TEMPLATE.format(title=title, reasons="; ".join(picked))

    def build_suggestion_message(self, suggestion: Suggestion) -> str:
        """친구 추천 카드의 보조 문구"""
        message = mutual_friends_label(suggestion.mutual_friends)
        if suggestion.hop_distance and suggestion.hop_distance > 2:
            message += f" · {suggestion.hop_distance} hops away"
        return message
