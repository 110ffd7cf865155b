"""
Резолвер исходов броска.

Модель вероятностей по площади:
1. Случайная точка доски (вероятность зоны пропорциональна площади кольца)
2. Определяем кольцо
3. Для кольца 4 - сегмент по углу
4. Множитель и выплата

Два входа:
- roll()          - локальный бросок (офлайн режим)
- resolve_many()  - коды исходов от внешнего источника (0=bullseye ... 5=mint)
"""

import itertools
import math
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .board import BoardConfig, Zone, ZONE_COLORS, get_board, ring_area
from .segments import Segment, get_segments, locate_segment
from . import layout


@dataclass(frozen=True)
class DartResult:
    zone: Zone
    angle: float                # угол попадания (0 для bullseye)
    radius: float               # расстояние от центра
    segment: Optional[Segment]  # только для yellow/pink/mint
    multiplier: float
    payout: float
    is_win: bool                # multiplier >= 1.0
    is_bullseye: bool
    bet_amount: float
    color: str


@dataclass(frozen=True)
class DartMarker:
    id: int
    angle: float
    radius: float
    color: str
    multiplier: float
    is_bullseye: bool
    payout: float


@dataclass(frozen=True)
class ResolvedDart:
    result: DartResult
    marker: DartMarker


@dataclass(frozen=True)
class ZoneThresholds:
    """Накопленные границы вероятностей (0 → 1)"""
    bull_end: float
    ring2_end: float
    ring3_end: float
    ring4_end: float
    # кольцо 5 занимает остаток до 1.0


def zone_thresholds(board: BoardConfig) -> ZoneThresholds:
    total = board.r5 * board.r5
    bull_end = ring_area(0, board.bullseye_r) / total
    ring2_end = bull_end + ring_area(board.bullseye_r, board.r2) / total
    ring3_end = ring2_end + ring_area(board.r2, board.r3) / total
    ring4_end = ring3_end + ring_area(board.r3, board.r4) / total
    return ZoneThresholds(bull_end, ring2_end, ring3_end, ring4_end)


def random_radius(inner: float, outer: float, rng) -> float:
    """Радиус равномерно по площади кольца (не по радиусу!)"""
    return math.sqrt(rng.random() * (outer * outer - inner * inner) + inner * inner)


def zone_bands(board: BoardConfig, zone: Zone) -> Tuple[Tuple[float, float], ...]:
    """Кольца (inner, outer), в которых лежит зона"""
    if zone is Zone.BULLSEYE:
        return ((0, board.bullseye_r),)
    if zone is Zone.PURPLE:
        return ((board.bullseye_r, board.r2), (board.r4, board.r5))
    if zone is Zone.BLUE:
        return ((board.r2, board.r3),)
    return ((board.r3, board.r4),)


class OutcomeResolver:
    """
    Превращает исход броска в конкретную точку на доске, множитель и выплату.
    Собственный rng и счётчик id маркеров - никакого глобального состояния.
    """

    def __init__(self, rng: random.Random = None, marker_ids: Iterable[int] = None):
        self.rng = rng or random.Random()
        self._marker_ids = iter(marker_ids) if marker_ids is not None else itertools.count(1)

    def _next_marker_id(self) -> int:
        return next(self._marker_ids)

    def _build(self, zone: Zone, angle: float, radius: float, segment: Optional[Segment],
               multiplier: float, color: str, bet: float) -> ResolvedDart:
        is_bullseye = zone is Zone.BULLSEYE
        payout = bet * multiplier

        result = DartResult(
            zone=zone,
            angle=0.0 if is_bullseye else angle,
            radius=radius,
            segment=segment,
            multiplier=multiplier,
            payout=payout,
            is_win=multiplier >= 1.0,
            is_bullseye=is_bullseye,
            bet_amount=bet,
            color=color,
        )
        marker = DartMarker(
            id=self._next_marker_id(),
            # угол bullseye только для визуального разброса
            angle=self.rng.random() * 360 if is_bullseye else angle,
            radius=radius,
            color=color,
            multiplier=multiplier,
            is_bullseye=is_bullseye,
            payout=payout,
        )
        return ResolvedDart(result=result, marker=marker)

    def roll(self, bet: float, difficulty) -> ResolvedDart:
        """Локальный бросок с розыгрышем зоны по площади"""
        board = get_board(difficulty)
        thresholds = zone_thresholds(board)

        angle = self.rng.random() * 360
        roll = self.rng.random()
        segment = None

        if roll < thresholds.bull_end:
            zone = Zone.BULLSEYE
            radius = self.rng.random() * board.bullseye_r
        elif roll < thresholds.ring2_end:
            zone = Zone.PURPLE
            radius = random_radius(board.bullseye_r, board.r2, self.rng)
        elif roll < thresholds.ring3_end:
            zone = Zone.BLUE
            radius = random_radius(board.r2, board.r3, self.rng)
        elif roll < thresholds.ring4_end:
            segment = locate_segment(get_segments(difficulty), angle)
            zone = segment.zone
            radius = random_radius(board.r3, board.r4, self.rng)
        else:
            zone = Zone.PURPLE
            radius = random_radius(board.r4, board.r5, self.rng)

        if segment is not None:
            multiplier, color = segment.multiplier, segment.color
        else:
            multiplier, color = board.zone_multiplier(zone), ZONE_COLORS[zone]

        return self._build(zone, angle, radius, segment, multiplier, color, bet)

    def resolve(self, code, bet: float, difficulty) -> ResolvedDart:
        """Точка попадания для уже известного исхода"""
        zone = Zone.from_code(code)
        board = get_board(difficulty)

        bands = zone_bands(board, zone)
        if len(bands) > 1:
            # Фиолетовая зона - два кольца, выбираем по площади
            pick = self.rng.random() * sum(ring_area(*band) for band in bands)
            for inner, outer in bands:
                pick -= ring_area(inner, outer)
                if pick < 0:
                    break
        else:
            inner, outer = bands[0]
        radius = random_radius(inner, outer, self.rng)

        angle = self.rng.random() * 360
        segment = None
        if zone.is_segment:
            # Угол только внутри сегмента нужного цвета
            matching = [s for s in get_segments(difficulty) if s.zone is zone]
            segment = matching[self.rng.randrange(len(matching))]
            angle = segment.start_angle + self.rng.random() * (segment.end_angle - segment.start_angle)

        multiplier = board.zone_multiplier(zone)
        color = segment.color if segment is not None else ZONE_COLORS[zone]
        return self._build(zone, angle, radius, segment, multiplier, color, bet)

    def resolve_many(self, codes: Iterable, bet_per_dart: float, difficulty) -> List[ResolvedDart]:
        """Результаты для списка кодов от внешнего источника, в порядке бросков"""
        zones = [Zone.from_code(code) for code in codes]
        return [self.resolve(zone, bet_per_dart, difficulty) for zone in zones]

    def screen_position(self, marker: DartMarker) -> Tuple[float, float]:
        return layout.screen_position(marker.angle, marker.radius, marker.is_bullseye, self.rng)
