"""
Источник исходов бросков.

Движок отправляет запрос {difficulty, dartsCount} и получает список кодов
зон (по одному на дротик, в порядке бросков). Откуда берутся коды - локальная
симуляция или внешний оракул - движку неважно.
"""

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

import aiohttp

from .board import Difficulty, Zone, ZONE_CODES, get_board, to_difficulty, zone_probabilities

logger = logging.getLogger(__name__)


class OutcomeSourceError(Exception):
    """Источник исходов не ответил или ответил ошибкой"""


@dataclass(frozen=True)
class OutcomeRequest:
    difficulty: Difficulty
    darts_count: int
    sequence: int = 0   # к какому раунду относится ответ

    def __post_init__(self):
        if self.darts_count < 1:
            raise ValueError("darts_count must be positive")

    def to_payload(self) -> Dict:
        return {"difficulty": to_difficulty(self.difficulty).value, "dartsCount": self.darts_count}


class OutcomeSource(ABC):

    @abstractmethod
    async def fetch(self, request: OutcomeRequest) -> List[Zone]:
        """Коды исходов для запроса"""
        ...


class LocalOutcomeSource(OutcomeSource):
    """Симуляция внешнего источника с сетевой задержкой"""

    def __init__(self, rng: random.Random = None, delay: float = 0.5):
        self.rng = rng or random.Random()
        self.delay = delay

    def draw(self, difficulty, darts_count: int) -> List[Zone]:
        probs = zone_probabilities(get_board(difficulty))
        weights = [probs[zone] for zone in ZONE_CODES]
        return self.rng.choices(ZONE_CODES, weights=weights, k=darts_count)

    async def fetch(self, request: OutcomeRequest) -> List[Zone]:
        codes = self.draw(request.difficulty, request.darts_count)
        if self.delay:
            await asyncio.sleep(self.delay)
        return codes


def parse_outcome_codes(payload: Dict, expected: int) -> List[Zone]:
    """Проверяет ответ оракула и возвращает зоны"""
    if not payload.get("ok"):
        raise OutcomeSourceError(f"Outcome source error: {payload}")
    codes = payload.get("result")
    if not isinstance(codes, list):
        raise OutcomeSourceError(f"Malformed outcome payload: {payload}")
    if len(codes) != expected:
        raise OutcomeSourceError(f"Expected {expected} outcomes, got {len(codes)}")
    return [Zone.from_code(code) for code in codes]


class RemoteOutcomeSource(OutcomeSource):
    """Внешний оракул исходов по HTTP"""

    def __init__(self, url: str, token: Optional[str] = None, timeout: float = 10):
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    async def fetch(self, request: OutcomeRequest) -> List[Zone]:
        data = request.to_payload()
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.url, headers=self.headers, json=data) as resp:
                    result = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise OutcomeSourceError(f"Outcome source unreachable: {e}") from e

        logger.debug(f"Ответ оракула: {result}")
        return parse_outcome_codes(result, request.darts_count)


def create_outcome_source(kind: str = "local", **options) -> OutcomeSource:
    """Источник исходов по имени из настроек"""
    if kind == "local":
        return LocalOutcomeSource(rng=options.get("rng"), delay=options.get("delay", 0.5))
    if kind == "remote":
        url = options.get("url")
        if not url:
            raise ValueError("Remote outcome source requires a url")
        return RemoteOutcomeSource(url, token=options.get("token"), timeout=options.get("timeout", 10))
    raise ValueError(f"Unknown outcome source: {kind}. Available: ['local', 'remote']")
