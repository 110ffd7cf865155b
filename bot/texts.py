from game.board import Zone, get_board, zone_probabilities, expected_return
from game.engine import DartsGame, RoundSummary, SessionStats
from game.resolver import DartResult

from .keyboards import DIFFICULTY_NAMES

ZONE_LABELS = {
    Zone.BULLSEYE: "🟢 Bullseye",
    Zone.PURPLE: "🟣 Фиолетовое",
    Zone.BLUE: "🔵 Синее",
    Zone.YELLOW: "🟡 Жёлтое",
    Zone.PINK: "🟠 Розовое",
    Zone.MINT: "🔴 Мятное",
}


def format_multiplier(value: float) -> str:
    if value >= 10:
        return f"{round(value)}×"
    return f"{value:.0f}×" if value % 1 == 0 else f"{value:.1f}×"


def format_history(game: DartsGame) -> str:
    return " ".join(format_multiplier(mult) for mult, _ in game.result_history)


def panel_text(game: DartsGame) -> str:
    bet_per_dart = game.bet_amount / game.darts_per_round
    return (
        f"🎯 <b>ДАРТС</b>\n\n"
        f"<blockquote>⚙️ Сложность: <b>{DIFFICULTY_NAMES[game.difficulty.value]}</b>\n"
        f"💵 Ставка за раунд: <b>{game.bet_amount:.2f}</b>\n"
        f"🎯 Дротиков: <b>{game.darts_per_round}</b> (по {bet_per_dart:.2f})\n"
        f"💰 Баланс: <b>{game.balance:.2f}</b></blockquote>"
    )


def dart_text(dart: DartResult, index: int, total: int, x: float, y: float) -> str:
    text = (
        f"🎯 Дротик <b>{index + 1}/{total}</b>: {ZONE_LABELS[dart.zone]} "
        f"<b>{format_multiplier(dart.multiplier)}</b>\n"
        f"💸 {dart.bet_amount:.2f} → <b>{dart.payout:.2f}</b>\n"
        f"📍 ({x:.1f}%, {y:.1f}%)"
    )
    if dart.is_bullseye:
        text = "🎉 <b>BULLSEYE!</b>\n" + text
    return text


def round_text(summary: RoundSummary, game: DartsGame) -> str:
    header = "🎉 <b>Выигрыш!</b>" if summary.is_win else "❌ <b>Проигрыш</b>"
    sign = "+" if summary.profit >= 0 else ""
    return (
        f"{header}\n\n"
        f"<blockquote>💵 Ставка: <b>{summary.total_bet:.2f}</b>\n"
        f"💸 Выплата: <b>{summary.payout:.2f}</b> ({sign}{summary.profit:.2f})\n"
        f"⚡️ Лучший множитель: <b>{format_multiplier(summary.best_multiplier)}</b>\n"
        f"💰 Баланс: <b>{game.balance:.2f}</b></blockquote>\n"
        f"Последние: {format_history(game)}"
    )


def stats_text(stats: SessionStats, balance: float) -> str:
    return (
        f"📊 <b>Статистика сессии</b>\n\n"
        f"<blockquote>🎮 Раундов: <b>{stats.total_rounds}</b>\n"
        f"✅ Выигрышей: <b>{stats.wins}</b>\n"
        f"❌ Проигрышей: <b>{stats.losses}</b>\n"
        f"📈 Итог: <b>{stats.net_pnl:+.2f}</b>\n"
        f"🏆 Крупнейший выигрыш: <b>{stats.biggest_win:.2f}</b>\n"
        f"⚡️ Максимальный множитель: <b>{format_multiplier(stats.biggest_multiplier)}</b>\n"
        f"💰 Баланс: <b>{balance:.2f}</b></blockquote>"
    )


def help_text() -> str:
    lines = ["ℹ️ <b>Как играть</b>\n",
             "Дротик попадает в случайную точку доски: чем меньше зона, тем выше множитель. "
             "Ставка делится поровну между дротиками раунда.\n"]
    for level, name in DIFFICULTY_NAMES.items():
        board = get_board(level)
        probs = zone_probabilities(board)
        table = ", ".join(
            f"{ZONE_LABELS[zone].split()[0]} {format_multiplier(board.zone_multiplier(zone))} ({p * 100:.1f}%)"
            for zone, p in probs.items()
        )
        lines.append(f"<b>{name}</b> - RTP {expected_return(board) * 100:.1f}%\n{table}\n")
    return "\n".join(lines)
