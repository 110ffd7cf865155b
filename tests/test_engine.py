import asyncio
import random
import unittest

from game.animation import DartAnimator
from game.board import Difficulty, Zone, get_board
from game.engine import DartsGame, GameState, RoundTimings, SessionStats
from game.outcomes import OutcomeRequest, OutcomeSource, OutcomeSourceError
from game.resolver import OutcomeResolver

NO_DELAY = RoundTimings(first_dart_delay=0, dart_gap=0, dart_gap_fast=0, finalize_delay=0)


class ScriptedSource(OutcomeSource):
    """Отдаёт заранее заданные исходы по одному списку на раунд"""

    def __init__(self, *rounds):
        self.rounds = list(rounds)
        self.requests = []

    async def fetch(self, request):
        self.requests.append(request)
        return self.rounds.pop(0)


class ManualSource(OutcomeSource):
    """Никогда не отвечает сам: исходы доставляет тест"""

    def __init__(self):
        self.requests = []

    async def fetch(self, request):
        self.requests.append(request)
        await asyncio.get_running_loop().create_future()


class FailingSource(OutcomeSource):

    async def fetch(self, request):
        raise OutcomeSourceError("oracle down")


class ManualAnimator(DartAnimator):
    """Запоминает колбэки вместо анимации"""

    def __init__(self):
        self.shown = []

    def present(self, pending, done):
        self.shown.append((pending, done))


class GameTestCase(unittest.IsolatedAsyncioTestCase):

    def make_game(self, source, **kwargs):
        kwargs.setdefault("timings", NO_DELAY)
        kwargs.setdefault("resolver", OutcomeResolver(rng=random.Random(1)))
        game = DartsGame(source, **kwargs)
        self.finished = asyncio.Event()
        game.subscribe(lambda g, state: state is GameState.RESULT and self.finished.set())
        return game

    async def wait_result(self):
        await asyncio.wait_for(self.finished.wait(), timeout=2)
        self.finished.clear()


class TestRoundAccounting(GameTestCase):

    async def test_single_bullseye_round(self):
        game = self.make_game(ScriptedSource(["bullseye"]), balance=100, bet_amount=10)
        self.assertTrue(game.play())
        self.assertEqual(game.balance, 90)
        self.assertIs(game.state, GameState.THROWING)

        await self.wait_result()
        self.assertAlmostEqual(game.balance, 90 + 77.0)
        self.assertTrue(game.last_round.is_win)
        self.assertEqual(game.last_result.zone, Zone.BULLSEYE)
        self.assertEqual(game.stats.wins, 1)

    async def test_multi_dart_loss(self):
        source = ScriptedSource(["purple", "blue"])
        game = self.make_game(source, balance=100, bet_amount=20, difficulty="medium", darts_per_round=2)
        game.play()
        await self.wait_result()

        summary = game.last_round
        self.assertEqual(source.requests[0].darts_count, 2)
        self.assertEqual([d.bet_amount for d in summary.darts], [10, 10])
        self.assertAlmostEqual(summary.payout, 10.0)
        self.assertFalse(summary.is_win)
        self.assertAlmostEqual(game.balance, 90.0)
        self.assertEqual(game.stats.losses, 1)
        self.assertAlmostEqual(game.stats.net_pnl, -10.0)

    async def test_break_even_counts_as_win(self):
        # easy blue 0.8x + yellow 1.2x returns the stake exactly
        game = self.make_game(ScriptedSource(["blue", "yellow"]), balance=50, bet_amount=10, darts_per_round=2)
        game.play()
        await self.wait_result()
        self.assertTrue(game.last_round.is_win)
        self.assertEqual(game.stats.wins, 1)
        self.assertEqual(game.stats.biggest_win, 0)

    async def test_balance_identity_over_many_rounds(self):
        rounds = [["purple", "mint", "blue"], ["bullseye", "pink", "yellow"], ["blue"] * 3]
        game = self.make_game(ScriptedSource(*rounds), balance=1000, bet_amount=30, darts_per_round=3)
        start = game.balance
        bets = payouts = 0.0
        for _ in rounds:
            game.play_again()
            game.play()
            await self.wait_result()
            bets += game.last_round.total_bet
            payouts += game.last_round.payout
        self.assertAlmostEqual(game.balance, start - bets + payouts)
        self.assertAlmostEqual(game.stats.net_pnl, payouts - bets)
        self.assertEqual(game.stats.total_rounds, 3)

    async def test_stats_track_biggest(self):
        game = self.make_game(ScriptedSource(["purple", "bullseye"], ["mint", "blue"]),
                              balance=1000, bet_amount=10, darts_per_round=2)
        game.play()
        await self.wait_result()
        game.play_again()
        game.play()
        await self.wait_result()
        # round 1: 5*0.5 + 5*7.7 = 41.0
        self.assertAlmostEqual(game.stats.biggest_win, 31.0)
        self.assertEqual(game.stats.biggest_multiplier, 7.7)
        self.assertEqual(game.stats.to_dict()["total_rounds"], 2)


class TestBetValidation(GameTestCase):

    async def test_rejects_non_positive_bet(self):
        game = self.make_game(ScriptedSource(), balance=100, bet_amount=0)
        self.assertFalse(game.play())
        self.assertIs(game.state, GameState.IDLE)
        self.assertEqual(game.balance, 100)

    async def test_rejects_bet_above_balance(self):
        game = self.make_game(ScriptedSource(), balance=5, bet_amount=10)
        self.assertFalse(game.play())
        self.assertEqual(game.balance, 5)

    async def test_play_while_throwing_is_noop(self):
        game = self.make_game(ManualSource(), balance=100, bet_amount=10)
        self.assertTrue(game.play())
        self.assertFalse(game.play())
        self.assertEqual(game.balance, 90)

    async def test_play_from_result_requires_play_again(self):
        game = self.make_game(ScriptedSource(["blue"], ["blue"]), balance=100, bet_amount=10)
        game.play()
        await self.wait_result()
        self.assertFalse(game.play())
        game.play_again()
        self.assertTrue(game.play())


class TestCancellation(GameTestCase):

    async def test_reset_mid_throw_forfeits_bet(self):
        source = ManualSource()
        game = self.make_game(source, balance=100, bet_amount=10)
        game.play()
        await asyncio.sleep(0)
        request = source.requests[0]

        game.reset()
        self.assertIs(game.state, GameState.IDLE)
        self.assertEqual(game.balance, 90)
        self.assertFalse(game.deliver_outcomes(request, ["bullseye"]))
        await asyncio.sleep(0.01)
        self.assertEqual(game.balance, 90)
        self.assertEqual(game.stats.total_rounds, 0)

    async def test_reset_clears_markers_and_history(self):
        game = self.make_game(ScriptedSource(["blue", "mint"]), balance=100, bet_amount=10, darts_per_round=2)
        game.play()
        await self.wait_result()
        self.assertEqual(len(game.visible_markers), 2)
        game.reset()
        self.assertEqual(game.visible_markers, [])
        self.assertEqual(game.result_history, [])
        self.assertIsNone(game.last_result)

    async def test_stale_animation_callback_ignored(self):
        source = ManualSource()
        animator = ManualAnimator()
        game = self.make_game(source, animator=animator, balance=100, bet_amount=10)
        game.play()
        await asyncio.sleep(0)
        game.deliver_outcomes(source.requests[0], ["bullseye"])
        await asyncio.sleep(0.01)
        _, done = animator.shown[0]

        game.reset()
        done()
        await asyncio.sleep(0.01)
        self.assertEqual(game.balance, 90)
        self.assertEqual(game.visible_markers, [])
        self.assertIs(game.state, GameState.IDLE)

    async def test_completion_fires_once(self):
        source = ManualSource()
        animator = ManualAnimator()
        game = self.make_game(source, animator=animator, balance=100, bet_amount=10, darts_per_round=2)
        game.play()
        await asyncio.sleep(0)
        game.deliver_outcomes(source.requests[0], ["blue", "blue"])
        await asyncio.sleep(0.01)

        pending, done = animator.shown[0]
        done()
        done()
        self.assertEqual(game.current_dart_index, 1)
        self.assertEqual(len(game.visible_markers), 1)

        await asyncio.sleep(0.01)
        self.assertEqual(animator.shown[1][0].dart_index, 1)
        animator.shown[1][1]()
        await self.wait_result()
        self.assertEqual(len(game.visible_markers), 2)

    async def test_outcome_count_mismatch(self):
        source = ManualSource()
        game = self.make_game(source, balance=100, bet_amount=10, darts_per_round=3)
        game.play()
        await asyncio.sleep(0)
        with self.assertRaises(ValueError):
            game.deliver_outcomes(source.requests[0], ["blue"])

    async def test_foreign_request_ignored(self):
        source = ManualSource()
        game = self.make_game(source, balance=100, bet_amount=10)
        game.play()
        await asyncio.sleep(0)
        with self.assertLogs("game.engine", level="INFO"):
            self.assertFalse(game.deliver_outcomes(OutcomeRequest("easy", 1, sequence=99), ["mint"]))
        self.assertIs(game.state, GameState.THROWING)

    async def test_source_failure_keeps_round_open(self):
        game = self.make_game(FailingSource(), balance=100, bet_amount=10)
        with self.assertLogs("game.engine", level="ERROR"):
            game.play()
            await asyncio.sleep(0.01)
        self.assertIs(game.state, GameState.THROWING)
        game.reset()
        self.assertIs(game.state, GameState.IDLE)
        self.assertEqual(game.balance, 90)

    async def test_unknown_code_from_source_is_logged(self):
        game = self.make_game(ScriptedSource(["green"]), balance=100, bet_amount=10)
        with self.assertLogs("game.engine", level="ERROR") as logs:
            game.play()
            await asyncio.sleep(0.01)
        self.assertIn("green", logs.output[0])
        self.assertIs(game.state, GameState.THROWING)
        self.assertEqual(game.balance, 90)

    async def test_wrong_outcome_count_from_source_is_logged(self):
        game = self.make_game(ScriptedSource(["blue"]), balance=100, bet_amount=10, darts_per_round=3)
        with self.assertLogs("game.engine", level="ERROR"):
            game.play()
            await asyncio.sleep(0.01)
        self.assertIs(game.state, GameState.THROWING)
        self.assertEqual(game.visible_markers, [])


class TestBoardState(GameTestCase):

    async def test_visible_markers_bounded(self):
        game = self.make_game(ScriptedSource(["blue", "mint", "pink", "yellow", "purple"]),
                              balance=100, bet_amount=10, darts_per_round=5,
                              max_visible_darts=3, history_size=4)
        game.play()
        await self.wait_result()
        markers = game.visible_markers
        self.assertEqual(len(markers), 3)
        self.assertEqual([m.id for m in markers], [3, 4, 5])

        history = game.result_history
        self.assertEqual(len(history), 4)
        self.assertEqual(history[0], (game.last_result.multiplier, game.last_result.color))

    async def test_darts_per_round_clamped(self):
        game = self.make_game(ScriptedSource(), max_darts_per_round=10)
        game.set_darts_per_round(50)
        self.assertEqual(game.darts_per_round, 10)
        game.set_darts_per_round(0)
        self.assertEqual(game.darts_per_round, 1)

    async def test_difficulty_change_ignored_while_throwing(self):
        game = self.make_game(ManualSource(), balance=100, bet_amount=10)
        game.play()
        game.set_difficulty("expert")
        self.assertIs(game.difficulty, Difficulty.EASY)

    async def test_difficulty_change_clears_board(self):
        game = self.make_game(ScriptedSource(["blue"]), balance=100, bet_amount=10)
        game.play()
        await self.wait_result()
        game.play_again()
        game.set_difficulty("hard")
        self.assertIs(game.difficulty, Difficulty.HARD)
        self.assertEqual(len(game.segments), get_board("hard").total_segments)
        self.assertEqual(game.visible_markers, [])

    async def test_listeners_see_transitions(self):
        seen = []
        game = self.make_game(ScriptedSource(["blue"]), balance=100, bet_amount=10)
        game.subscribe(lambda g, state: seen.append(state))
        game.play()
        await self.wait_result()
        game.play_again()
        self.assertEqual(seen, [GameState.THROWING, GameState.RESULT, GameState.IDLE])


class TestSessionStats(unittest.TestCase):

    def test_record_round(self):
        stats = SessionStats()
        stats.record_round(10, 25, 2.5)
        stats.record_round(10, 4, 0.4)
        self.assertEqual((stats.wins, stats.losses, stats.total_rounds), (1, 1, 2))
        self.assertAlmostEqual(stats.net_pnl, 9)
        self.assertEqual(stats.biggest_win, 15)
        self.assertEqual(stats.biggest_multiplier, 2.5)


if __name__ == '__main__':
    unittest.main()
