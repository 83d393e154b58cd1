# services/ai_service.py

"""
AI анализ записей дневника через OpenAI с эвристическим fallback.
"""

import json
import time
import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional

import openai
from openai import AsyncOpenAI

from core.models import Sentiment
from services.journal_service import analyze_text, DEFAULT_SUGGESTION

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You analyze personal wellness journal entries. "
    "Reply with a JSON object with keys: "
    "sentiment (one of positive, negative, neutral), "
    "patterns (list of short observations about recurring emotional patterns), "
    "intensity (integer 1-10 for emotional intensity), "
    "suggestions (list of 1-4 short, practical, supportive suggestions). "
    "Do not diagnose. Reply with JSON only."
)

class AIServiceError(Exception):
    """Базовое исключение AI сервиса"""
    pass

class AIProviderError(AIServiceError):
    """Ошибка провайдера или неверный ответ"""
    pass

@dataclass
class AIStats:
    """Статистика AI сервиса"""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    fallback_responses: int = 0
    total_tokens_used: int = 0
    average_response_time_ms: float = 0.0

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return (self.successful_requests / self.total_requests) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_requests': self.total_requests,
            'successful_requests': self.successful_requests,
            'failed_requests': self.failed_requests,
            'fallback_responses': self.fallback_responses,
            'total_tokens_used': self.total_tokens_used,
            'average_response_time_ms': round(self.average_response_time_ms, 2),
            'success_rate': round(self.success_rate, 2),
        }

def normalize_analysis(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Проверить и привести ответ модели к формату AIAnalysis"""
    if not isinstance(payload, dict):
        raise AIProviderError("Analysis payload is not an object")

    sentiment = str(payload.get('sentiment', 'neutral')).lower()
    if sentiment not in {s.value for s in Sentiment}:
        sentiment = Sentiment.NEUTRAL.value

    try:
        intensity = int(round(float(payload.get('intensity', 3))))
    except (TypeError, ValueError):
        intensity = 3

    patterns = [str(p) for p in payload.get('patterns') or [] if str(p).strip()]
    suggestions = [str(s) for s in payload.get('suggestions') or [] if str(s).strip()]

    return {
        'sentiment': sentiment,
        'patterns': patterns[:5],
        'intensity': min(10, max(1, intensity)),
        'suggestions': suggestions[:4] or [DEFAULT_SUGGESTION],
    }

class JournalAnalyzer:
    """Анализ текста дневника: OpenAI если настроен, иначе эвристика"""

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini",
                 max_tokens: int = 600, timeout: int = 30, client: Optional[AsyncOpenAI] = None,
                 max_retries: int = 2, retry_delay: float = 1.0,
                 fallback_enabled: bool = True):
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.fallback_enabled = fallback_enabled
        self.stats = AIStats()

        self.client = client
        if self.client is None and api_key:
            self.client = AsyncOpenAI(api_key=api_key, timeout=timeout)

        self.enabled = self.client is not None
        logger.info(f"Journal analyzer initialized - OpenAI: {'✅' if self.enabled else '❌'}")

    @classmethod
    def from_config(cls, app_config=None) -> "JournalAnalyzer":
        if app_config is None:
            from config import config as app_config
        return cls(
            api_key=app_config.ai.openai_api_key,
            model=app_config.ai.openai_model,
            max_tokens=app_config.ai.openai_max_tokens,
            timeout=app_config.ai.request_timeout,
            fallback_enabled=app_config.ai.fallback_enabled,
        )

    async def analyze(self, text: str) -> Dict[str, Any]:
        """Результат в формате AIAnalysis; при ошибке провайдера эвристика, если fallback включён"""
        self.stats.total_requests += 1
        if not self.enabled:
            self.stats.fallback_responses += 1
            return analyze_text(text)

        start_time = time.time()
        try:
            result = await self._analyze_openai(text)
            self.stats.successful_requests += 1
            self._update_average_response_time(int((time.time() - start_time) * 1000))
            return result
        except AIServiceError as e:
            self.stats.failed_requests += 1
            if not self.fallback_enabled:
                logger.error(f"AI analysis failed: {e}")
                raise
            logger.error(f"AI analysis failed, using heuristic analysis: {e}")
            self.stats.fallback_responses += 1
            return analyze_text(text)

    async def _analyze_openai(self, text: str) -> Dict[str, Any]:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": text},
        ]

        for attempt in range(self.max_retries):
            try:
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_tokens=self.max_tokens,
                    temperature=0.3,
                    response_format={"type": "json_object"},
                )
                content = (response.choices[0].message.content or "").strip()
                if response.usage:
                    self.stats.total_tokens_used += response.usage.total_tokens
                try:
                    return normalize_analysis(json.loads(content))
                except ValueError as e:
                    raise AIProviderError(f"Invalid JSON from model: {e}")

            except (openai.RateLimitError, openai.APITimeoutError, openai.APIConnectionError) as e:
                logger.warning(f"OpenAI transient error on attempt {attempt + 1}: {e}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay * (2 ** attempt))
                else:
                    raise AIServiceError(f"OpenAI unavailable: {e}")

            except openai.OpenAIError as e:
                raise AIProviderError(f"OpenAI API failed: {e}")

        raise AIServiceError("OpenAI request was not attempted")

    def _update_average_response_time(self, elapsed_ms: int) -> None:
        n = self.stats.successful_requests
        self.stats.average_response_time_ms += (elapsed_ms - self.stats.average_response_time_ms) / max(n, 1)
