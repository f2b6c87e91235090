"""
Round and game state machine for the Edutainment multiplication drill.

A QuizSession owns all game state (factors, round counters, score and the
last answer). The presentation layer calls its operations in response to
user actions and reads the observable fields afterwards, either by polling
``snapshot()`` or by subscribing a callback.
"""
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional

from .config_manager import ConfigManager
from .models import AnswerResult, DrillSettings, GameSummary, SessionPhase
from .quiz_engine import QuizEngine

logger = logging.getLogger(__name__)

SessionObserver = Callable[["QuizSession"], Any]


class QuizSessionError(Exception):
    """Base exception for quiz session errors."""
    pass


class InvalidSessionStateError(QuizSessionError):
    """Raised when the session is in the wrong phase for the requested operation."""
    pass


class SessionLifecycleLogger:
    """Structured logging for session lifecycle events."""

    @staticmethod
    def log_transition(session_id: Any, from_phase: SessionPhase, to_phase: SessionPhase, reason: str = None) -> None:
        """Log a phase transition."""
        logger.debug(
            f"Session lifecycle: TRANSITION - Session {session_id}, {from_phase.value} -> {to_phase.value}" +
            (f" ({reason})" if reason else ""),
            extra={
                'event_type': 'session_transition',
                'session_id': session_id,
                'from_phase': from_phase.value,
                'to_phase': to_phase.value,
                'reason': reason,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_round_started(session_id: Any, round_number: int, target_rounds: int, left: int, right: int) -> None:
        """Log the start of a round."""
        logger.info(
            f"Session lifecycle: ROUND_START - Session {session_id}, Round {round_number}/{target_rounds}",
            extra={
                'event_type': 'round_started',
                'session_id': session_id,
                'round_number': round_number,
                'target_rounds': target_rounds,
                'left_factor': left,
                'right_factor': right,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_answer_evaluated(session_id: Any, result: AnswerResult) -> None:
        """Log the evaluation of a submitted answer."""
        logger.info(
            f"Session lifecycle: EVALUATED - Session {session_id}, "
            f"{result.left_factor} x {result.right_factor}, correct={result.is_correct}, score={result.score}",
            extra={
                'event_type': 'answer_evaluated',
                'session_id': session_id,
                'is_correct': result.is_correct,
                'expected': result.expected,
                'score': result.score,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_game_ended(session_id: Any, summary: GameSummary) -> None:
        """Log the end of a game."""
        logger.info(
            f"Session lifecycle: GAME_ENDED - Session {session_id}, "
            f"Final score {summary.final_score}/{summary.target_rounds}",
            extra={
                'event_type': 'game_ended',
                'session_id': session_id,
                'final_score': summary.final_score,
                'target_rounds': summary.target_rounds,
                'timestamp': time.time()
            }
        )


class QuizSession:
    """
    Drives scoring, round progression and end-of-game transitions.

    Phases move IDLE -> ROUND_ACTIVE -> EVALUATED -> ROUND_ACTIVE ... until
    ``rounds_played == target_rounds``, when ``advance()`` moves to
    GAME_ENDED. From there ``restart()`` or ``continue_with_score()`` starts
    a new game.
    """

    def __init__(
        self,
        settings: Optional[DrillSettings] = None,
        rng: Optional[random.Random] = None,
        session_id: Any = None
    ):
        """
        Initialize an idle session.

        Args:
            settings: Drill settings, defaults to DrillSettings()
            rng: Random source used for factor draws
            session_id: Identifier used in log records (e.g. a channel ID)
        """
        settings = settings or DrillSettings()
        result = ConfigManager.validate_target_rounds(settings.target_rounds)
        if not result['success']:
            raise ValueError(result['error'])

        self.session_id = session_id
        self._engine = QuizEngine(rng, settings.min_factor, settings.max_factor)

        self.left_factor = 0
        self.right_factor = 0
        self.target_rounds = settings.target_rounds
        self.pending_target_rounds = settings.target_rounds
        self.rounds_played = 0
        self.score = 0
        self.submitted_answer = ""
        self.phase = SessionPhase.IDLE
        self.last_result: Optional[AnswerResult] = None

        self._observers: List[SessionObserver] = []

    # Observer interface

    def subscribe(self, callback: SessionObserver) -> None:
        """Register a callback invoked with the session after every state change."""
        if callback not in self._observers:
            self._observers.append(callback)

    def unsubscribe(self, callback: SessionObserver) -> None:
        """Remove a previously registered callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._observers):
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Session observer {callback!r} failed for session {self.session_id}: {e}", exc_info=True)

    def _set_phase(self, phase: SessionPhase, reason: str = None) -> None:
        SessionLifecycleLogger.log_transition(self.session_id, self.phase, phase, reason)
        self.phase = phase

    def _apply_pending_target(self) -> None:
        if self.pending_target_rounds != self.target_rounds:
            logger.info(
                f"Target rounds for session {self.session_id} changed "
                f"{self.target_rounds} -> {self.pending_target_rounds}"
            )
            self.target_rounds = self.pending_target_rounds

    # Operations

    def start_round(self) -> None:
        """
        Draw a new factor pair and begin the next round.

        Raises:
            InvalidSessionStateError: If the game has already ended
        """
        if self.phase == SessionPhase.IDLE:
            self._apply_pending_target()

        if self.is_game_ended():
            raise InvalidSessionStateError(
                f"Game already ended after {self.rounds_played} rounds; restart or continue first"
            )

        self.left_factor, self.right_factor = self._engine.draw_factors()
        self.rounds_played += 1
        self.submitted_answer = ""
        self.last_result = None
        self._set_phase(SessionPhase.ROUND_ACTIVE, "round started")

        SessionLifecycleLogger.log_round_started(
            self.session_id, self.rounds_played, self.target_rounds, self.left_factor, self.right_factor
        )
        self._notify()

    def submit_answer(self, raw: Optional[str]) -> AnswerResult:
        """
        Evaluate the player's answer for the current round.

        Args:
            raw: Answer text as typed; surrounding whitespace is ignored

        Returns:
            AnswerResult with correctness and the expected product

        Raises:
            InvalidSessionStateError: If no round is awaiting an answer
        """
        if self.phase != SessionPhase.ROUND_ACTIVE:
            raise InvalidSessionStateError(
                f"Cannot submit an answer while session is {self.phase.value}"
            )

        submitted = "" if raw is None else str(raw).strip()
        is_correct, expected = self._engine.check_answer(
            self.left_factor, self.right_factor, submitted
        )
        self.submitted_answer = submitted

        if is_correct:
            self.score += 1

        result = AnswerResult(
            is_correct=is_correct,
            expected=expected,
            left_factor=self.left_factor,
            right_factor=self.right_factor,
            submitted=submitted,
            score=self.score
        )
        self.last_result = result
        self._set_phase(SessionPhase.EVALUATED, "answer submitted")

        SessionLifecycleLogger.log_answer_evaluated(self.session_id, result)
        self._notify()
        return result

    def is_game_ended(self) -> bool:
        """Check whether the current game has played all its rounds."""
        return self.rounds_played == self.target_rounds

    def advance(self) -> Optional[GameSummary]:
        """
        Move on after the feedback for a round was acknowledged.

        Returns:
            GameSummary if the game has ended, None if a new round started

        Raises:
            InvalidSessionStateError: If the current round was not evaluated yet
        """
        if self.phase != SessionPhase.EVALUATED:
            raise InvalidSessionStateError(
                f"Cannot advance while session is {self.phase.value}"
            )

        if not self.is_game_ended():
            self.start_round()
            return None

        summary = self.get_summary()
        self._set_phase(SessionPhase.GAME_ENDED, "all rounds played")
        SessionLifecycleLogger.log_game_ended(self.session_id, summary)
        self._notify()
        return summary

    def restart(self) -> None:
        """Discard the score and begin a new game."""
        self.score = 0
        self.rounds_played = 0
        self._apply_pending_target()
        logger.info(f"Session {self.session_id} restarted with score reset")
        self.start_round()

    def continue_with_score(self) -> None:
        """Keep the score and begin another full game."""
        self.rounds_played = 0
        self._apply_pending_target()
        logger.info(f"Session {self.session_id} continued with score {self.score}")
        self.start_round()

    def set_target_rounds(self, rounds: int) -> Dict[str, Any]:
        """
        Request a new round count for the next game.

        Args:
            rounds: Number of rounds, must be within [5, 20]

        Returns:
            Dictionary with success status, message and user-friendly message.
            Out-of-range values are rejected and leave the session unchanged.
        """
        result = ConfigManager.validate_target_rounds(rounds)
        if not result['success']:
            return result

        self.pending_target_rounds = rounds
        if self.phase == SessionPhase.IDLE:
            self.target_rounds = rounds

        applies_now = self.phase == SessionPhase.IDLE
        logger.info(
            f"Target rounds for session {self.session_id} set to {rounds}"
            + ("" if applies_now else " (takes effect next game)")
        )
        self._notify()
        return {
            'success': True,
            'applies_now': applies_now,
            'message': f"Target rounds set to {rounds}",
            'user_message': (
                f"✅ Games will last {rounds} rounds"
                if applies_now
                else f"✅ The next game will last {rounds} rounds"
            )
        }

    # Queries

    def get_summary(self) -> GameSummary:
        """Build a summary of the current game."""
        return GameSummary(
            final_score=self.score,
            rounds_played=self.rounds_played,
            target_rounds=self.target_rounds
        )

    def snapshot(self) -> Dict[str, Any]:
        """
        Get the observable state for rendering.

        Returns:
            Dictionary with factors, counters, score, answer text and phase
        """
        return {
            'left_factor': self.left_factor,
            'right_factor': self.right_factor,
            'score': self.score,
            'rounds_played': self.rounds_played,
            'target_rounds': self.target_rounds,
            'pending_target_rounds': self.pending_target_rounds,
            'submitted_answer': self.submitted_answer,
            'phase': self.phase.value,
            'game_ended': self.is_game_ended()
        }
