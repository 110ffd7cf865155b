import math
from typing import Tuple

# Доска рисуется в квадрате VIEW_BOX x VIEW_BOX с центром посередине
VIEW_BOX = 500
CENTER = VIEW_BOX / 2
ANGLE_OFFSET = -90          # 0° = 12 часов
BOARD_PADDING = 0.12        # отступ доски внутри окна анимации
BULLSEYE_JITTER = 4         # разброс маркера в bullseye


def polar(cx: float, cy: float, r: float, angle_deg: float) -> Tuple[float, float]:
    rad = math.radians(angle_deg + ANGLE_OFFSET)
    return cx + r * math.cos(rad), cy + r * math.sin(rad)


def view_to_percent(x: float, y: float) -> Tuple[float, float]:
    """Координаты view box -> проценты (0-100) окна с учётом отступа"""
    scale = (1 - 2 * BOARD_PADDING) * 100
    return (
        BOARD_PADDING * 100 + (x / VIEW_BOX) * scale,
        BOARD_PADDING * 100 + (y / VIEW_BOX) * scale,
    )


def screen_position(angle: float, radius: float, is_bullseye: bool, rng) -> Tuple[float, float]:
    """Точка попадания в процентах окна анимации"""
    if is_bullseye:
        x, y = polar(CENTER, CENTER, rng.random() * BULLSEYE_JITTER, rng.random() * 360)
    else:
        x, y = polar(CENTER, CENTER, radius, angle)
    return view_to_percent(x, y)
