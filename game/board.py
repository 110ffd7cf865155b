"""
🎯 Конфигурация доски по уровням сложности

Кольца (изнутри наружу):
    bullseye (0 → bullseye_r)  - джекпот
    кольцо 2 (bullseye_r → r2) - фиолетовое (проигрыш)
    кольцо 3 (r2 → r3)         - синее (проигрыш)
    кольцо 4 (r3 → r4)         - сегменты жёлтый/розовый/мятный (выигрыш)
    кольцо 5 (r4 → r5)         - фиолетовое (проигрыш)

Вероятность зоны = площадь кольца / площадь доски. Множитель bullseye
подобран так, чтобы ожидаемый возврат был ~98% (комиссия ~2%) на всех уровнях.
Числа менять нельзя: от них зависит честность игры.
"""

import enum
from dataclasses import dataclass
from typing import Dict, Tuple


class InvalidOutcomeCode(ValueError):
    """Код исхода вне шести допустимых зон"""


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class Zone(str, enum.Enum):
    BULLSEYE = "bullseye"
    PURPLE = "purple"
    BLUE = "blue"
    YELLOW = "yellow"
    PINK = "pink"
    MINT = "mint"

    @property
    def code(self) -> int:
        return ZONE_CODES.index(self)

    @property
    def is_segment(self) -> bool:
        return self in SEGMENT_ZONES

    @classmethod
    def from_code(cls, code) -> "Zone":
        """Зона по коду исхода: Zone, имя зоны или индекс 0-5"""
        if isinstance(code, Zone):
            return code
        if isinstance(code, int) and not isinstance(code, bool):
            if 0 <= code < len(ZONE_CODES):
                return ZONE_CODES[code]
        elif isinstance(code, str):
            try:
                return cls(code.lower())
            except ValueError:
                pass
        raise InvalidOutcomeCode(f"Invalid outcome code: {code!r}")


# Порядок кодов внешнего источника: 0=bullseye ... 5=mint
ZONE_CODES: Tuple[Zone, ...] = (
    Zone.BULLSEYE, Zone.PURPLE, Zone.BLUE, Zone.YELLOW, Zone.PINK, Zone.MINT,
)

# Цвета сегментов кольца 4 по color_index (0=yellow, 1=pink, 2=mint)
SEGMENT_ZONES: Tuple[Zone, ...] = (Zone.YELLOW, Zone.PINK, Zone.MINT)

ZONE_COLORS: Dict[Zone, str] = {
    Zone.PURPLE: "#577590",
    Zone.BLUE: "#277DA1",
    Zone.YELLOW: "#F9C74F",
    Zone.PINK: "#F3722C",
    Zone.MINT: "#F94144",
    Zone.BULLSEYE: "#90BE6D",
}


@dataclass(frozen=True)
class BoardConfig:
    """Геометрия и таблица выплат одного уровня сложности"""

    # Радиусы границ колец
    bullseye_r: float
    r2: float   # внешний край кольца 2 / внутренний кольца 3
    r3: float   # внешний край кольца 3 / внутренний кольца 4
    r4: float   # внешний край кольца 4 / внутренний кольца 5
    r5: float   # внешний край кольца 5 (граница доски)

    # Множители
    purple_mult: float    # кольца 2 и 5
    blue_mult: float      # кольцо 3
    yellow_mult: float    # сегменты кольца 4
    pink_mult: float
    mint_mult: float
    bullseye_mult: float

    # Количество сегментов кольца 4 (сумма = total_segments)
    yellow_count: int
    pink_count: int
    mint_count: int
    total_segments: int

    @property
    def radii(self) -> Tuple[float, ...]:
        return (self.bullseye_r, self.r2, self.r3, self.r4, self.r5)

    @property
    def segment_multipliers(self) -> Tuple[float, float, float]:
        return (self.yellow_mult, self.pink_mult, self.mint_mult)

    @property
    def segment_counts(self) -> Tuple[int, int, int]:
        return (self.yellow_count, self.pink_count, self.mint_count)

    def zone_multiplier(self, zone: Zone) -> float:
        return {
            Zone.BULLSEYE: self.bullseye_mult,
            Zone.PURPLE: self.purple_mult,
            Zone.BLUE: self.blue_mult,
            Zone.YELLOW: self.yellow_mult,
            Zone.PINK: self.pink_mult,
            Zone.MINT: self.mint_mult,
        }[Zone.from_code(zone)]


# EASY: 18 сегментов (9Y, 5P, 4M), толстое цветное кольцо. EV ≈ 0.980
EASY_BOARD = BoardConfig(
    bullseye_r=12, r2=55, r3=100, r4=139, r5=168,
    purple_mult=0.5, blue_mult=0.8,
    yellow_mult=1.2, pink_mult=1.5, mint_mult=2.7,
    bullseye_mult=7.7,
    yellow_count=9, pink_count=5, mint_count=4, total_segments=18,
)

# MEDIUM: 18 сегментов (9Y, 5P, 4M), кольцо 4 тоньше на ~50%. EV ≈ 0.981
MEDIUM_BOARD = BoardConfig(
    bullseye_r=12, r2=65, r3=120, r4=140, r5=168,
    purple_mult=0.4, blue_mult=0.6,
    yellow_mult=1.3, pink_mult=2.0, mint_mult=4.0,
    bullseye_mult=39,
    yellow_count=9, pink_count=5, mint_count=4, total_segments=18,
)

# HARD: 18 сегментов (9Y, 6P, 3M). EV ≈ 0.982
HARD_BOARD = BoardConfig(
    bullseye_r=12, r2=70, r3=130, r4=145, r5=168,
    purple_mult=0.2, blue_mult=0.5,
    yellow_mult=1.5, pink_mult=2.5, mint_mult=5.0,
    bullseye_mult=65,
    yellow_count=9, pink_count=6, mint_count=3, total_segments=18,
)

# EXPERT: 12 сегментов (6Y, 4P, 2M), самое тонкое кольцо 4. EV ≈ 0.982
EXPERT_BOARD = BoardConfig(
    bullseye_r=12, r2=75, r3=138, r4=148, r5=168,
    purple_mult=0.1, blue_mult=0.3,
    yellow_mult=1.5, pink_mult=3.0, mint_mult=8.0,
    bullseye_mult=95,
    yellow_count=6, pink_count=4, mint_count=2, total_segments=12,
)

BOARD_CONFIG: Dict[Difficulty, BoardConfig] = {
    Difficulty.EASY: EASY_BOARD,
    Difficulty.MEDIUM: MEDIUM_BOARD,
    Difficulty.HARD: HARD_BOARD,
    Difficulty.EXPERT: EXPERT_BOARD,
}

DIFFICULTY_LEVELS = tuple(BOARD_CONFIG.keys())

# Чередование цветов кольца 4 (соседние сегменты разного цвета)
RING_LAYOUT: Dict[Difficulty, Tuple[int, ...]] = {
    Difficulty.EASY: (0, 1, 0, 2, 0, 1, 0, 2, 0, 1, 0, 2, 0, 1, 0, 1, 0, 2),
    Difficulty.MEDIUM: (0, 1, 0, 2, 0, 1, 0, 2, 0, 1, 0, 2, 0, 1, 0, 1, 0, 2),
    Difficulty.HARD: (0, 1, 0, 1, 0, 2, 0, 1, 0, 1, 0, 2, 0, 1, 0, 1, 0, 2),
    Difficulty.EXPERT: (0, 1, 0, 2, 0, 1, 0, 1, 0, 2, 0, 1),
}


def to_difficulty(difficulty) -> Difficulty:
    try:
        return Difficulty(difficulty)
    except ValueError:
        raise ValueError(
            f"Unknown difficulty: {difficulty}. Available: {[d.value for d in DIFFICULTY_LEVELS]}"
        ) from None


def get_board(difficulty) -> BoardConfig:
    """Конфигурация доски для уровня сложности"""
    return BOARD_CONFIG[to_difficulty(difficulty)]


def get_layout(difficulty) -> Tuple[int, ...]:
    return RING_LAYOUT[to_difficulty(difficulty)]


def ring_area(inner: float, outer: float) -> float:
    # π сокращается во всех отношениях
    return outer * outer - inner * inner


def zone_probabilities(board: BoardConfig) -> Dict[Zone, float]:
    """
    Вероятность каждой зоны при равномерном по площади броске.
    Кольцо 4 делится между цветами пропорционально числу сегментов.
    """
    total = board.r5 * board.r5
    segmented = ring_area(board.r3, board.r4) / total

    probs = {
        Zone.BULLSEYE: ring_area(0, board.bullseye_r) / total,
        Zone.PURPLE: (ring_area(board.bullseye_r, board.r2) + ring_area(board.r4, board.r5)) / total,
        Zone.BLUE: ring_area(board.r2, board.r3) / total,
    }
    for zone, count in zip(SEGMENT_ZONES, board.segment_counts):
        probs[zone] = segmented * count / board.total_segments
    return probs


def expected_return(board: BoardConfig) -> float:
    """Ожидаемая выплата на единицу ставки (RTP)"""
    probs = zone_probabilities(board)
    return sum(p * board.zone_multiplier(zone) for zone, p in probs.items())


def house_edge(board: BoardConfig) -> float:
    return 1.0 - expected_return(board)
