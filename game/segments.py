"""
Сегменты кольца 4.

Все сегменты одинаковой угловой ширины, углы в градусах по часовой
стрелке от 12 часов. Последовательность для уровня сложности всегда одна
и та же, поэтому кэшируется на всё время жизни процесса.
"""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from .board import Difficulty, Zone, SEGMENT_ZONES, ZONE_COLORS, get_board, get_layout, to_difficulty


@dataclass(frozen=True)
class Segment:
    id: int
    color_index: int      # 0=yellow, 1=pink, 2=mint
    start_angle: float
    end_angle: float
    color: str
    multiplier: float

    @property
    def zone(self) -> Zone:
        return SEGMENT_ZONES[self.color_index]

    @property
    def mid_angle(self) -> float:
        return (self.start_angle + self.end_angle) / 2

    def contains(self, angle: float) -> bool:
        return self.start_angle <= angle < self.end_angle


def generate_segments(difficulty) -> Tuple[Segment, ...]:
    """Строит сегменты кольца 4 по раскладке цветов уровня"""
    board = get_board(difficulty)
    layout = get_layout(difficulty)
    degrees_per_seg = 360 / board.total_segments
    multipliers = board.segment_multipliers

    return tuple(
        Segment(
            id=i,
            color_index=color_index,
            start_angle=i * degrees_per_seg,
            end_angle=(i + 1) * degrees_per_seg,
            color=ZONE_COLORS[SEGMENT_ZONES[color_index]],
            multiplier=multipliers[color_index],
        )
        for i, color_index in enumerate(layout)
    )


def normalize_angle(angle: float) -> float:
    return angle % 360


def locate_segment(segments: Sequence[Segment], angle: float) -> Segment:
    """Сегмент, в который попадает угол"""
    normalized = normalize_angle(angle)
    degrees_per_seg = 360 / len(segments)
    # Округление на границе 360°/0° может дать индекс len(segments)
    index = min(int(normalized // degrees_per_seg), len(segments) - 1)
    return segments[index]


class SegmentCache:
    """Ленивый кэш сегментов по уровням сложности"""

    def __init__(self):
        self._segments: Dict[Difficulty, Tuple[Segment, ...]] = {}

    def get(self, difficulty) -> Tuple[Segment, ...]:
        key = to_difficulty(difficulty)
        if key not in self._segments:
            self._segments[key] = generate_segments(key)
        return self._segments[key]

    def clear(self):
        self._segments.clear()

    def __contains__(self, difficulty) -> bool:
        return to_difficulty(difficulty) in self._segments


_default_cache = SegmentCache()


def get_segments(difficulty) -> Tuple[Segment, ...]:
    return _default_cache.get(difficulty)


def clear_segment_cache():
    _default_cache.clear()
