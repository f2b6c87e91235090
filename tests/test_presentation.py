"""
Unit tests for the question reveal animation helpers.
"""
import unittest

from edutainment.presentation import (
    PLACEHOLDER,
    ease_in_out,
    opacity_at,
    render_equation,
    reveal_duration,
    reveal_frames,
)


class TestRevealAnimation(unittest.TestCase):
    """Test cases for opacity curves and equation frames."""

    def test_ease_in_out_endpoints(self):
        """The curve starts at 0, ends at 1 and is clamped outside."""
        self.assertEqual(ease_in_out(0.0), 0.0)
        self.assertEqual(ease_in_out(1.0), 1.0)
        self.assertEqual(ease_in_out(0.5), 0.5)
        self.assertEqual(ease_in_out(-3.0), 0.0)
        self.assertEqual(ease_in_out(4.0), 1.0)

    def test_ease_in_out_monotonic(self):
        """Opacity never decreases over time."""
        values = [ease_in_out(i / 100) for i in range(101)]
        self.assertEqual(values, sorted(values))

    def test_opacity_respects_delay(self):
        """A part stays hidden until its delay has passed."""
        self.assertEqual(opacity_at(0.9, delay=1.0), 0.0)
        self.assertEqual(opacity_at(2.0, delay=1.0), 1.0)
        self.assertEqual(opacity_at(1.0, delay=1.0, duration=0), 1.0)

    def test_render_equation_progression(self):
        """Parts appear in order: left, x, right, =, answer slot."""
        self.assertEqual(render_equation(7, 8, 0.0), " ".join([PLACEHOLDER] * 5))
        self.assertTrue(render_equation(7, 8, 0.6).startswith("7 "))
        self.assertEqual(render_equation(7, 8, 2.1).split(" ")[:3], ["7", "x", "8"])
        self.assertEqual(render_equation(7, 8, reveal_duration()), "7 x 8 = ?")

    def test_reveal_frames(self):
        """Frames are time ordered, distinct and end fully revealed."""
        frames = reveal_frames(3, 12)
        times = [at for at, _ in frames]
        texts = [text for _, text in frames]

        self.assertEqual(times, sorted(times))
        self.assertEqual(len(set(texts)), len(texts))
        self.assertEqual(len(frames), 6)
        self.assertEqual(texts[-1], "3 x 12 = ?")
        self.assertLessEqual(times[-1], reveal_duration())


if __name__ == '__main__':
    unittest.main()
