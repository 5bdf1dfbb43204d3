"""OpenAI 기반 제로샷 챌린지 스코러

관심도 이력이 전혀 없는 종류(예: 한 번도 기록하지 않은 수면, 영양 챌린지)는
관심도 요인이 0이 되어 항상 목록 아래로 밀립니다. 이 스코러는 사용자의 다른
카테고리 관심도를 근거로 GPT 모델에게 새 종류의 챌린지가 얼마나 어울리는지
0~1 점수로 물어봅니다.
"""

import json
import logging
import os
import re
from typing import Any, Dict, List, Mapping

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = "You score fitness challenges for a community app and reply with a single JSON object."

USER_PROMPT = """The member below has no history in the categories of these challenges.
Estimate how likely each challenge is to suit them, from 0.0 (poor fit) to 1.0 (great fit).

Member:
{member}

Challenges:
{challenges}

Reply with one JSON object mapping every challenge_id to its score, for example {{"c_sleep": 0.7}}."""

# API 실패 시 모든 후보에 주는 중립 점수
FALLBACK_SCORE = 0.5

# 프롬프트에 넣을 관심도 상위 카테고리 수
TOP_INTERESTS = 3

_FENCE = re.compile(r"```(?:json)?")
_FIRST_OBJECT = re.compile(r"\{[^{}]*\}")


class OpenAIZeroShotScorer:
    """
    새 종류의 챌린지에 대한 적합도를 GPT로 추정하는 스코러

    ChallengeRecommender의 zero_shot_scorer로 넘기면, 관심도 0인 챌린지마다
    breakdown["llm"]에 점수가 기록되고 가중치를 곱한 보너스가 더해집니다.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-3.5-turbo",
        temperature: float = 0.1,
        max_tokens: int = 500,
    ) -> None:
        """
        Args:
            api_key: OpenAI API 키 (없으면 OPENAI_API_KEY 환경변수)
            model: 채팅 모델 이름
            temperature: 생성 온도 (점수 일관성을 위해 낮게 유지)
            max_tokens: 응답 최대 토큰 수

        Raises:
            ValueError: API 키가 없을 때
            RuntimeError: openai 패키지가 설치되지 않았을 때
        """
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not set and no api_key was given.")

        try:
            from openai import OpenAI
        except ImportError as exc:
            raise RuntimeError("The openai package is not installed (pip install openai).") from exc

        self.client = OpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def score(self, context: Mapping[str, Any], challenge_features: List[Dict[str, Any]]) -> Dict[str, float]:
        """
        후보 챌린지마다 0~1 적합도 점수를 반환하는 함수

        응답에 빠진 챌린지는 0.0, API 호출 자체가 실패하면 모든 챌린지에
        중립 점수 0.5를 줍니다.

        Args:
            context: interest_scores, reference_time 등 사용자 컨텍스트
            challenge_features: challenge_id, title, type, difficulty, reasoning_tokens

        Returns:
            challenge_id -> 점수
        """
        ids = [features["challenge_id"] for features in challenge_features]
        if not ids:
            return {}

        try:
            raw_text = self._complete(self._build_prompt(context, challenge_features))
        except Exception as exc:
            logger.error(f"Zero-shot challenge scoring failed, using {FALLBACK_SCORE}: {exc}")
            return {challenge_id: FALLBACK_SCORE for challenge_id in ids}

        logger.info(f"Zero-shot scores received for {len(ids)} challenges")
        parsed = self._extract_scores(raw_text)
        return {challenge_id: self._clamp(parsed.get(challenge_id, 0.0)) for challenge_id in ids}

    def _complete(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return (response.choices[0].message.content or "").strip()

    def _build_prompt(self, context: Mapping[str, Any], challenge_features: List[Dict[str, Any]]) -> str:
        interests = context.get("interest_scores") or {}
        strongest = sorted(interests.items(), key=lambda item: item[1], reverse=True)[:TOP_INTERESTS]

        member = [f"- now: {context.get('reference_time', 'unknown')}"]
        if strongest:
            member.append("- strongest interests: " + ", ".join(f"{name} ({value:.0f}/100)" for name, value in strongest))

        challenges = []
        for features in challenge_features:
            signals = features.get("reasoning_tokens") or {}
            line = (
                f"- {features['challenge_id']}: \"{features.get('title') or ''}\""
                f" type={features.get('type')} difficulty={features.get('difficulty')}"
            )
            if signals:
                line += " " + " ".join(f"{name}={value:.1f}" for name, value in signals.items())
            challenges.append(line)

        return USER_PROMPT.format(member="\n".join(member), challenges="\n".join(challenges))

    def _extract_scores(self, generated_text: str) -> Dict[str, float]:
        """모델 응답에서 점수 객체를 꺼냄 (코드 블록, 앞뒤 문장 허용)"""
        text = _FENCE.sub("", generated_text or "").strip()

        candidates = [text]
        match = _FIRST_OBJECT.search(text)
        if match and match.group(0) != text:
            candidates.append(match.group(0))

        for candidate in candidates:
            try:
                data = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            if isinstance(data, dict):
                return self._numeric_scores(data)

        logger.warning(f"Could not parse JSON from: {text}")
        return {}

    @staticmethod
    def _numeric_scores(data: Mapping[str, Any]) -> Dict[str, float]:
        scores: Dict[str, float] = {}
        for key, value in data.items():
            try:
                scores[str(key)] = float(value)
            except (TypeError, ValueError):
                logger.debug(f"Discarding non-numeric score for {key}: {value}")
        return scores

    @staticmethod
    def _clamp(value: float) -> float:
        return max(0.0, min(1.0, value))
