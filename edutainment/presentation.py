"""
Question reveal animation for the Discord presentation layer.

Every value here is a pure function of elapsed time, so the bot decides
when to redraw and the session state never waits on it.
"""
from typing import List, Tuple

MASCOTS = "🐻 🐼 🦛"

FADE_DURATION = 1.0
VISIBLE_OPACITY = 0.5
PLACEHOLDER = "▫️"

# (part, delay in seconds) for the staggered fade-in of "a x b = ?"
REVEAL_SCHEDULE: List[Tuple[str, float]] = [
    ("left", 0.0),
    ("times", 1.0),
    ("right", 1.5),
    ("equals", 2.0),
    ("answer", 3.0),
]


def ease_in_out(t: float) -> float:
    """Cubic ease-in-out over t in [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    if t < 0.5:
        return 4 * t * t * t
    return 1 - ((-2 * t + 2) ** 3) / 2


def opacity_at(elapsed: float, delay: float, duration: float = FADE_DURATION) -> float:
    """Opacity of a part that starts fading in after ``delay`` seconds."""
    if duration <= 0:
        return 1.0 if elapsed >= delay else 0.0
    return ease_in_out((elapsed - delay) / duration)


def render_equation(left: int, right: int, elapsed: float) -> str:
    """
    Render the question as it looks ``elapsed`` seconds into the reveal.

    Parts that have not reached VISIBLE_OPACITY are drawn as placeholders.
    """
    text = {
        "left": str(left),
        "times": "x",
        "right": str(right),
        "equals": "=",
        "answer": "?",
    }
    parts = []
    for part, delay in REVEAL_SCHEDULE:
        if opacity_at(elapsed, delay) >= VISIBLE_OPACITY:
            parts.append(text[part])
        else:
            parts.append(PLACEHOLDER)
    return " ".join(parts)


def reveal_duration() -> float:
    """Seconds until every part is fully visible."""
    return max(delay for _, delay in REVEAL_SCHEDULE) + FADE_DURATION


def reveal_frames(left: int, right: int) -> List[Tuple[float, str]]:
    """
    Frames worth drawing during the reveal.

    Returns:
        List of (seconds since reveal start, rendered text). A frame is
        emitted each time a part crosses VISIBLE_OPACITY, which for the
        symmetric ease happens half way through its fade.
    """
    frames = [(0.0, render_equation(left, right, 0.0))]
    for _, delay in REVEAL_SCHEDULE:
        at = delay + FADE_DURATION / 2
        text = render_equation(left, right, at)
        if text != frames[-1][1]:
            frames.append((at, text))
    return frames
