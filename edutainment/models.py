"""
Core data models for the Edutainment multiplication drill.
"""
from dataclasses import dataclass
from enum import Enum


class SessionPhase(Enum):
    """Enumeration of the phases a drill session moves through."""
    IDLE = "idle"
    ROUND_ACTIVE = "round_active"
    EVALUATED = "evaluated"
    GAME_ENDED = "game_ended"


@dataclass
class DrillSettings:
    """Configuration settings for a drill session."""
    target_rounds: int = 5
    min_factor: int = 2
    max_factor: int = 12


@dataclass
class AnswerResult:
    """Outcome of one submitted answer."""
    is_correct: bool
    expected: int
    left_factor: int
    right_factor: int
    submitted: str
    score: int


@dataclass
class GameSummary:
    """Summary shown when a game reaches its target round count."""
    final_score: int
    rounds_played: int
    target_rounds: int
