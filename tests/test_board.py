import unittest

from game.board import (
    BOARD_CONFIG, DIFFICULTY_LEVELS, RING_LAYOUT, ZONE_CODES,
    Difficulty, InvalidOutcomeCode, Zone,
    expected_return, get_board, house_edge, zone_probabilities,
)


class TestBoardConfig(unittest.TestCase):
    """
    Geometry and payout table invariants for every difficulty tier.
    """

    def test_radii_strictly_increasing(self):
        for difficulty in DIFFICULTY_LEVELS:
            radii = get_board(difficulty).radii
            self.assertEqual(len(radii), 5)
            for inner, outer in zip(radii, radii[1:]):
                self.assertLess(inner, outer, difficulty)

    def test_segment_counts_sum_to_total(self):
        for difficulty in DIFFICULTY_LEVELS:
            board = get_board(difficulty)
            self.assertEqual(sum(board.segment_counts), board.total_segments)

    def test_layout_matches_counts(self):
        for difficulty in DIFFICULTY_LEVELS:
            board = get_board(difficulty)
            layout = RING_LAYOUT[difficulty]
            self.assertEqual(len(layout), board.total_segments)
            self.assertEqual(
                (layout.count(0), layout.count(1), layout.count(2)),
                board.segment_counts,
            )

    def test_layout_never_repeats_adjacent_color(self):
        for difficulty in DIFFICULTY_LEVELS:
            layout = RING_LAYOUT[difficulty]
            for i, color in enumerate(layout):
                # includes the wrap from the last arc back to the first
                self.assertNotEqual(color, layout[(i + 1) % len(layout)], difficulty)

    def test_easy_constants(self):
        board = get_board("easy")
        self.assertEqual(board.radii, (12, 55, 100, 139, 168))
        self.assertEqual(board.bullseye_mult, 7.7)
        self.assertEqual(board.segment_multipliers, (1.2, 1.5, 2.7))
        self.assertEqual((board.purple_mult, board.blue_mult), (0.5, 0.8))

    def test_expert_constants(self):
        board = get_board(Difficulty.EXPERT)
        self.assertEqual(board.radii, (12, 75, 138, 148, 168))
        self.assertEqual(board.bullseye_mult, 95)
        self.assertEqual(board.total_segments, 12)

    def test_string_and_enum_lookup_agree(self):
        self.assertIs(get_board("medium"), BOARD_CONFIG[Difficulty.MEDIUM])

    def test_unknown_difficulty_fails_fast(self):
        with self.assertRaises(ValueError):
            get_board("impossible")


class TestHouseEdge(unittest.TestCase):

    def test_probabilities_sum_to_one(self):
        for difficulty in DIFFICULTY_LEVELS:
            probs = zone_probabilities(get_board(difficulty))
            self.assertEqual(set(probs), set(ZONE_CODES))
            self.assertAlmostEqual(sum(probs.values()), 1.0, places=12)

    def test_expected_return_near_98_percent(self):
        for difficulty in DIFFICULTY_LEVELS:
            rtp = expected_return(get_board(difficulty))
            self.assertGreater(rtp, 0.975, difficulty)
            self.assertLess(rtp, 0.985, difficulty)

    def test_easy_expected_return(self):
        self.assertAlmostEqual(expected_return(get_board("easy")), 0.9797, places=3)
        self.assertAlmostEqual(house_edge(get_board("easy")), 0.0203, places=3)

    def test_bullseye_probability_same_for_all_tiers(self):
        # every tier shares bullseye_r=12 and r5=168
        for difficulty in DIFFICULTY_LEVELS:
            probs = zone_probabilities(get_board(difficulty))
            self.assertAlmostEqual(probs[Zone.BULLSEYE], 144 / 28224)


class TestZoneCodes(unittest.TestCase):

    def test_index_codes(self):
        self.assertIs(Zone.from_code(0), Zone.BULLSEYE)
        self.assertIs(Zone.from_code(5), Zone.MINT)
        self.assertEqual(Zone.PINK.code, 4)

    def test_name_codes(self):
        self.assertIs(Zone.from_code("blue"), Zone.BLUE)
        self.assertIs(Zone.from_code("Yellow"), Zone.YELLOW)
        self.assertIs(Zone.from_code(Zone.PURPLE), Zone.PURPLE)

    def test_unknown_codes_rejected(self):
        for code in (6, -1, "green", None, 2.0, True):
            with self.assertRaises(InvalidOutcomeCode):
                Zone.from_code(code)

    def test_invalid_code_is_value_error(self):
        self.assertTrue(issubclass(InvalidOutcomeCode, ValueError))

    def test_zone_multiplier(self):
        board = get_board("medium")
        self.assertEqual(board.zone_multiplier(Zone.PURPLE), 0.4)
        self.assertEqual(board.zone_multiplier("blue"), 0.6)
        self.assertEqual(board.zone_multiplier(0), 39)


if __name__ == '__main__':
    unittest.main()
