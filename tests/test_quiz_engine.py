"""
Unit tests for the QuizEngine class.
"""
import unittest
import random

from edutainment.quiz_engine import QuizEngine
from tests.test_fixtures import ScriptedRandom


class TestQuizEngine(unittest.TestCase):
    """Test cases for factor drawing and answer checking."""

    def setUp(self):
        """Set up test fixtures."""
        self.engine = QuizEngine(random.Random(42))

    def test_draw_factors_within_range(self):
        """Every drawn factor lies in [2, 12]."""
        for _ in range(500):
            left, right = self.engine.draw_factors()
            self.assertGreaterEqual(left, 2)
            self.assertLessEqual(left, 12)
            self.assertGreaterEqual(right, 2)
            self.assertLessEqual(right, 12)

    def test_draw_factors_covers_whole_range(self):
        """Both range ends can be drawn."""
        seen = set()
        for _ in range(2000):
            seen.update(self.engine.draw_factors())
        self.assertEqual(seen, set(range(2, 13)))

    def test_draw_factors_allows_repeats(self):
        """Draws are with replacement so squares are possible."""
        engine = QuizEngine(ScriptedRandom([7, 7]))
        self.assertEqual(engine.draw_factors(), (7, 7))

    def test_draw_factors_reproducible_with_seed(self):
        """The same seed yields the same draws."""
        first = QuizEngine(random.Random(7))
        second = QuizEngine(random.Random(7))
        self.assertEqual(
            [first.draw_factors() for _ in range(10)],
            [second.draw_factors() for _ in range(10)]
        )

    def test_invalid_factor_range(self):
        """An empty factor range is rejected."""
        with self.assertRaises(ValueError):
            QuizEngine(min_factor=12, max_factor=2)

    def test_parse_answer_valid(self):
        """Whole numbers parse, surrounding whitespace is ignored."""
        self.assertEqual(self.engine.parse_answer("56"), 56)
        self.assertEqual(self.engine.parse_answer(" 56 "), 56)
        self.assertEqual(self.engine.parse_answer("\t56\n"), 56)
        self.assertEqual(self.engine.parse_answer("-4"), -4)
        self.assertEqual(self.engine.parse_answer("+4"), 4)
        self.assertEqual(self.engine.parse_answer("007"), 7)
        self.assertEqual(self.engine.parse_answer("0" * 5000 + "56"), 56)

    def test_parse_answer_invalid(self):
        """Anything that isn't a whole number parses to None."""
        for raw in ["", "   ", "abc", "5 6", "56.0", "5e1", "-", "+", "٥٦", "1_000", None]:
            with self.subTest(raw=raw):
                self.assertIsNone(self.engine.parse_answer(raw))

    def test_parse_answer_too_many_digits(self):
        """Numbers longer than any product are wrong answers, not errors."""
        self.assertEqual(self.engine.parse_answer("144"), 144)
        self.assertIsNone(self.engine.parse_answer("1440"))
        self.assertIsNone(self.engine.parse_answer("5" * 5000))
        self.assertIsNone(self.engine.parse_answer("-" + "5" * 5000))
        self.assertEqual(self.engine.check_answer(7, 8, "5" * 5000), (False, 56))

    def test_check_answer(self):
        """Correct iff the parsed value equals the product."""
        self.assertEqual(self.engine.check_answer(7, 8, "56"), (True, 56))
        self.assertEqual(self.engine.check_answer(7, 8, " 56 "), (True, 56))
        self.assertEqual(self.engine.check_answer(7, 8, "55"), (False, 56))
        self.assertEqual(self.engine.check_answer(7, 8, "abc"), (False, 56))
        self.assertEqual(self.engine.check_answer(7, 8, ""), (False, 56))


if __name__ == '__main__':
    unittest.main()
