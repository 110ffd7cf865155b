from aiogram.types import ReplyKeyboardMarkup, KeyboardButton, InlineKeyboardMarkup, InlineKeyboardButton

from game.autoplay import AUTO_THROW_OPTIONS
from game.board import DIFFICULTY_LEVELS

BET_AMOUNTS = (1, 5, 10, 25, 50, 100)
DARTS_OPTIONS = (1, 2, 3, 5, 10)

DIFFICULTY_NAMES = {
    "easy": "🟢 Лёгкий",
    "medium": "🟡 Средний",
    "hard": "🟠 Сложный",
    "expert": "🔴 Эксперт",
}

# ==================== ГЛАВНОЕ МЕНЮ ====================

def get_main_menu():
    """Главное меню с кнопками"""
    keyboard = ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text="🎯 Играть")],
            [KeyboardButton(text="📊 Статистика"), KeyboardButton(text="ℹ️ Помощь")]
        ],
        resize_keyboard=True
    )
    return keyboard

# ==================== ПАНЕЛЬ ИГРЫ ====================

def get_game_panel(auto_active: bool = False):
    """Бросок и настройки раунда"""
    if auto_active:
        return InlineKeyboardMarkup(inline_keyboard=[
            [InlineKeyboardButton(text="⏹ Остановить автоигру", callback_data="auto_stop")],
        ])
    keyboard = InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🎯 Бросить", callback_data="throw")],
        [
            InlineKeyboardButton(text="⚙️ Сложность", callback_data="menu_difficulty"),
            InlineKeyboardButton(text="💵 Ставка", callback_data="menu_bet")
        ],
        [
            InlineKeyboardButton(text="🎯 Дротики", callback_data="menu_darts"),
            InlineKeyboardButton(text="🔁 Автоигра", callback_data="menu_auto")
        ],
        [InlineKeyboardButton(text="🔄 Сброс", callback_data="reset")]
    ])
    return keyboard

# ==================== СЛОЖНОСТЬ ====================

def get_difficulty_keyboard():
    """Выбор уровня сложности"""
    rows = [
        [InlineKeyboardButton(text=DIFFICULTY_NAMES[d.value], callback_data=f"difficulty_{d.value}")]
        for d in DIFFICULTY_LEVELS
    ]
    rows.append([InlineKeyboardButton(text="◀️ Назад", callback_data="back_panel")])
    return InlineKeyboardMarkup(inline_keyboard=rows)

# ==================== СУММА СТАВКИ ====================

def get_amount_keyboard():
    """Быстрые кнопки для выбора суммы"""
    buttons = [
        InlineKeyboardButton(text=f"{amount}", callback_data=f"amount_{amount}")
        for amount in BET_AMOUNTS
    ]
    keyboard = InlineKeyboardMarkup(inline_keyboard=[
        buttons[:3],
        buttons[3:],
        [InlineKeyboardButton(text="✍️ Своя сумма", callback_data="amount_custom")],
        [InlineKeyboardButton(text="◀️ Назад", callback_data="back_panel")]
    ])
    return keyboard

def get_cancel_keyboard():
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="❌ Отмена", callback_data="cancel")]
    ])

# ==================== ДРОТИКИ ====================

def get_darts_keyboard(max_darts: int):
    """Количество дротиков за раунд"""
    buttons = [
        InlineKeyboardButton(text=f"{count} 🎯", callback_data=f"darts_{count}")
        for count in DARTS_OPTIONS if count <= max_darts
    ]
    keyboard = InlineKeyboardMarkup(inline_keyboard=[
        buttons,
        [InlineKeyboardButton(text="◀️ Назад", callback_data="back_panel")]
    ])
    return keyboard

# ==================== АВТОИГРА ====================

def get_auto_keyboard():
    """Количество раундов автоигры"""
    keyboard = InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text=f"×{count}", callback_data=f"auto_{count}")
            for count in AUTO_THROW_OPTIONS
        ],
        [InlineKeyboardButton(text="◀️ Назад", callback_data="back_panel")]
    ])
    return keyboard

# ==================== РЕЗУЛЬТАТ ====================

def get_result_keyboard():
    keyboard = InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🎮 Играть снова", callback_data="play_again")],
        [
            InlineKeyboardButton(text="⚙️ Настройки", callback_data="back_panel"),
            InlineKeyboardButton(text="🔄 Сброс", callback_data="reset")
        ]
    ])
    return keyboard
