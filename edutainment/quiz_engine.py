"""
Quiz engine core logic for the Edutainment multiplication drill.
Handles factor drawing and answer evaluation.
"""
import random
import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


class QuizEngine:
    """Core quiz engine that draws factor pairs and checks answers."""

    MIN_FACTOR = 2
    MAX_FACTOR = 12

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        min_factor: int = MIN_FACTOR,
        max_factor: int = MAX_FACTOR
    ):
        """
        Initialize the quiz engine.

        Args:
            rng: Random source, defaults to a fresh random.Random()
            min_factor: Smallest factor that can be drawn (inclusive)
            max_factor: Largest factor that can be drawn (inclusive)

        Raises:
            ValueError: If the factor range is empty
        """
        if min_factor > max_factor:
            raise ValueError(f"Invalid factor range: [{min_factor}, {max_factor}]")

        self._rng = rng or random.Random()
        self.min_factor = min_factor
        self.max_factor = max_factor

    def draw_factors(self) -> Tuple[int, int]:
        """
        Draw two factors independently and uniformly from the factor range.

        Returns:
            Tuple of (left_factor, right_factor)

        Note:
            Draws are with replacement, so 7 x 7 is as likely as 3 x 5.
        """
        left = self._rng.randint(self.min_factor, self.max_factor)
        right = self._rng.randint(self.min_factor, self.max_factor)
        logger.debug(f"Drew factors {left} x {right}")
        return left, right

    def parse_answer(self, raw: Optional[str]) -> Optional[int]:
        """
        Parse raw answer text into an integer.

        Args:
            raw: Text as typed by the player

        Returns:
            The parsed integer, or None if the text is not a whole number
            or has more digits than any product of the factor range
        """
        if raw is None:
            return None

        text = str(raw).strip()
        if not text:
            return None

        digits = text[1:] if text[0] in "+-" else text
        if not digits.isascii() or not digits.isdigit():
            return None

        significant = digits.lstrip("0") or "0"
        if len(significant) > len(str(self.max_factor * self.max_factor)):
            return None

        value = int(significant)
        return -value if text[0] == "-" else value

    def check_answer(self, left: int, right: int, raw: Optional[str]) -> Tuple[bool, int]:
        """
        Check a raw answer against the product of two factors.

        Args:
            left: Left factor
            right: Right factor
            raw: Text as typed by the player

        Returns:
            Tuple of (is_correct, expected_product). Unparsable text is
            reported as incorrect.
        """
        expected = left * right
        parsed = self.parse_answer(raw)

        if parsed is None:
            logger.debug(f"Unparsable answer {raw!r} for {left} x {right}")
            return False, expected

        return parsed == expected, expected
