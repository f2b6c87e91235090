"""
Drill session controller for the Edutainment bot.
Manages one drill session per Discord channel.
"""
import logging
import time
from typing import Dict, Optional, List, Any
from datetime import datetime

from .models import SessionPhase
from .quiz_session import QuizSession, QuizSessionError, InvalidSessionStateError
from .config_manager import ConfigManager


class DrillControllerError(Exception):
    """Base exception for drill controller errors."""
    pass


class SessionConflictError(DrillControllerError):
    """Raised when attempting to create a session that conflicts with existing session."""
    pass


class SessionNotFoundError(DrillControllerError):
    """Raised when attempting to operate on a non-existent session."""
    pass


END_GAME_CHOICES = ("restart", "continue")


class DrillController:
    """
    Orchestrates drill sessions across Discord channels.

    Each channel can have at most one drill session at a time. Public
    operations never raise: they return a dictionary with a ``success``
    flag and a ``user_message`` ready to show in the channel.
    """

    MAX_ERRORS_PER_CHANNEL = 10

    def __init__(self, config_manager: ConfigManager):
        """
        Initialize the drill controller.

        Args:
            config_manager: Instance for managing configuration
        """
        self.logger = logging.getLogger(__name__)
        self.config_manager = config_manager

        # Active sessions mapped by channel ID
        self._active_sessions: Dict[int, QuizSession] = {}
        self._start_times: Dict[int, datetime] = {}

        # Error tracking
        self._session_errors: Dict[int, List[str]] = {}

        self.logger.info("DrillController initialized")

    def get_session(self, channel_id: int) -> Optional[QuizSession]:
        """
        Get the session for a channel.

        Args:
            channel_id: Discord channel identifier

        Returns:
            QuizSession if one exists, None otherwise
        """
        return self._active_sessions.get(channel_id)

    def has_active_session(self, channel_id: int) -> bool:
        """
        Check if a channel has a drill session.

        Args:
            channel_id: Discord channel identifier

        Returns:
            True if channel has a session, False otherwise
        """
        return channel_id in self._active_sessions

    def get_session_state(self, channel_id: int) -> SessionPhase:
        """
        Get the current phase of a channel's session.

        Args:
            channel_id: Discord channel identifier

        Returns:
            Current session phase, IDLE when there is no session
        """
        session = self._active_sessions.get(channel_id)
        if session is None:
            return SessionPhase.IDLE
        return session.phase

    def _require_session(self, channel_id: int) -> QuizSession:
        session = self._active_sessions.get(channel_id)
        if session is None:
            raise SessionNotFoundError(f"No drill running in channel {channel_id}")
        return session

    def start_drill(self, channel_id: int) -> Dict[str, Any]:
        """
        Start a drill in a channel and begin its first round.

        Args:
            channel_id: Discord channel identifier

        Returns:
            Dictionary with operation results and error information
        """
        try:
            if self.has_active_session(channel_id):
                raise SessionConflictError(f"Drill already running in channel {channel_id}")

            settings = self.config_manager.get_drill_settings()
            session = QuizSession(settings=settings, session_id=channel_id)
            session.start_round()

            self._active_sessions[channel_id] = session
            self._start_times[channel_id] = datetime.now()
            self._cleanup_session_errors(channel_id)

            self.logger.info(
                f"Started drill for channel {channel_id}: rounds={session.target_rounds}",
                extra={
                    'event_type': 'drill_started',
                    'channel_id': channel_id,
                    'target_rounds': session.target_rounds,
                    'timestamp': time.time()
                }
            )
            return {
                'success': True,
                'message': "Drill started successfully",
                'session_info': self.get_session_progress(channel_id)
            }

        except Exception as e:
            return self._handle_session_error(channel_id, e, "start_drill")

    def submit_answer(self, channel_id: int, raw: str) -> Dict[str, Any]:
        """
        Submit an answer for the current round of a channel's drill.

        Args:
            channel_id: Discord channel identifier
            raw: Answer text as typed

        Returns:
            Dictionary with the AnswerResult under ``result``
        """
        try:
            session = self._require_session(channel_id)
            result = session.submit_answer(raw)
            return {
                'success': True,
                'message': "Answer evaluated",
                'result': result,
                'session_info': self.get_session_progress(channel_id)
            }

        except Exception as e:
            return self._handle_session_error(channel_id, e, "submit_answer")

    def advance(self, channel_id: int) -> Dict[str, Any]:
        """
        Acknowledge round feedback and move to the next round or the game end.

        Args:
            channel_id: Discord channel identifier

        Returns:
            Dictionary with ``game_ended`` and, when it has, a ``summary``
        """
        try:
            session = self._require_session(channel_id)
            summary = session.advance()
            return {
                'success': True,
                'message': "Game ended" if summary else "Next round started",
                'game_ended': summary is not None,
                'summary': summary,
                'session_info': self.get_session_progress(channel_id)
            }

        except Exception as e:
            return self._handle_session_error(channel_id, e, "advance")

    def choose_end_game(self, channel_id: int, choice: str) -> Dict[str, Any]:
        """
        Resolve the end-of-game choice.

        Args:
            channel_id: Discord channel identifier
            choice: "restart" to reset the score, "continue" to keep it

        Returns:
            Dictionary with operation results and error information
        """
        try:
            if choice not in END_GAME_CHOICES:
                raise ValueError(f"Unknown end-of-game choice: {choice!r}")

            session = self._require_session(channel_id)
            if session.phase != SessionPhase.GAME_ENDED:
                raise InvalidSessionStateError(
                    f"Game in channel {channel_id} has not ended (phase {session.phase.value})"
                )

            if choice == "restart":
                session.restart()
            else:
                session.continue_with_score()

            return {
                'success': True,
                'message': f"New game started ({choice})",
                'choice': choice,
                'session_info': self.get_session_progress(channel_id)
            }

        except Exception as e:
            return self._handle_session_error(channel_id, e, "choose_end_game")

    def set_target_rounds(self, channel_id: int, rounds: int) -> Dict[str, Any]:
        """
        Change the round count for a channel.

        With a drill running the change applies to its next game; without one
        it becomes the default for new drills.

        Args:
            channel_id: Discord channel identifier
            rounds: Number of rounds per game

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        try:
            session = self._active_sessions.get(channel_id)
            if session is None:
                return self.config_manager.set_default_target_rounds(rounds)
            return session.set_target_rounds(rounds)

        except Exception as e:
            return self._handle_session_error(channel_id, e, "set_target_rounds")

    def stop_drill(self, channel_id: int) -> Dict[str, Any]:
        """
        Stop a channel's drill and discard its session.

        Args:
            channel_id: Discord channel identifier

        Returns:
            Dictionary with operation results and the final session info
        """
        session_info = self.get_session_progress(channel_id)

        if session_info is None:
            return {
                'success': False,
                'message': "No active drill to stop in this channel",
                'user_message': "ℹ️ No active drill found in this channel"
            }

        del self._active_sessions[channel_id]
        self._start_times.pop(channel_id, None)
        self._cleanup_session_errors(channel_id)

        self.logger.info(
            f"Stopped drill for channel {channel_id} with score {session_info['score']}",
            extra={
                'event_type': 'drill_stopped',
                'channel_id': channel_id,
                'score': session_info['score'],
                'timestamp': time.time()
            }
        )
        return {
            'success': True,
            'message': "Drill stopped successfully",
            'session_info': session_info
        }

    def get_session_progress(self, channel_id: int) -> Optional[Dict[str, Any]]:
        """
        Get progress information for a channel's session.

        Args:
            channel_id: Discord channel identifier

        Returns:
            Dictionary with progress info, None if no session
        """
        session = self._active_sessions.get(channel_id)
        if session is None:
            return None

        progress = session.snapshot()
        progress['start_time'] = self._start_times.get(channel_id)
        return progress

    def get_all_active_sessions(self) -> Dict[int, Dict[str, Any]]:
        """
        Get information about all sessions.

        Returns:
            Dictionary mapping channel IDs to session progress info
        """
        return {
            channel_id: self.get_session_progress(channel_id)
            for channel_id in self._active_sessions
        }

    def get_session_status_summary(self, channel_id: int) -> str:
        """
        Get a human-readable summary of the session status.

        Args:
            channel_id: Discord channel identifier

        Returns:
            Formatted string describing the session status
        """
        session_info = self.get_session_progress(channel_id)

        if session_info is None:
            return "No active drill in this channel."

        status_parts = [
            f"Round: {session_info['rounds_played']}/{session_info['target_rounds']}",
            f"Score: {session_info['score']}",
            f"Status: {session_info['phase'].replace('_', ' ').title()}"
        ]

        if session_info['pending_target_rounds'] != session_info['target_rounds']:
            status_parts.append(f"Next game: {session_info['pending_target_rounds']} rounds")

        start_time = session_info['start_time']
        if start_time is not None:
            duration = datetime.now() - start_time
            minutes = int(duration.total_seconds() // 60)
            seconds = int(duration.total_seconds() % 60)
            status_parts.append(f"Duration: {minutes}m {seconds}s")

        return " | ".join(status_parts)

    def get_error_summary(self, channel_id: int) -> Dict[str, Any]:
        """
        Get error summary for a specific channel.

        Args:
            channel_id: Discord channel identifier

        Returns:
            Dictionary with error information
        """
        return {
            'channel_id': channel_id,
            'errors': self._session_errors.get(channel_id, []),
            'error_count': len(self._session_errors.get(channel_id, [])),
            'has_errors': channel_id in self._session_errors
        }

    def _handle_session_error(self, channel_id: int, error: Exception, operation: str) -> Dict[str, Any]:
        """
        Handle session errors with logging and error tracking.

        Args:
            channel_id: Discord channel identifier
            error: The exception that occurred
            operation: Description of the operation that failed

        Returns:
            Dictionary with error handling results
        """
        error_msg = f"Error in {operation} for channel {channel_id}: {error}"
        if isinstance(error, (DrillControllerError, QuizSessionError, ValueError)):
            self.logger.warning(error_msg)
        else:
            self.logger.error(error_msg, exc_info=True)

        errors = self._session_errors.setdefault(channel_id, [])
        errors.append(f"{operation}: {error}")
        if len(errors) > self.MAX_ERRORS_PER_CHANNEL:
            del errors[:-self.MAX_ERRORS_PER_CHANNEL]

        return {
            'success': False,
            'error': str(error),
            'operation': operation,
            'user_message': self._get_user_friendly_error_message(error, operation, channel_id)
        }

    def _get_user_friendly_error_message(self, error: Exception, operation: str,
                                         channel_id: Optional[int] = None) -> str:
        """
        Generate user-friendly error messages.

        Args:
            error: The exception that occurred
            operation: Description of the operation that failed
            channel_id: Channel the error happened in, used to pick a hint

        Returns:
            User-friendly error message
        """
        if isinstance(error, SessionConflictError):
            return "❌ A drill is already running in this channel. Stop it first with `/stop`."

        elif isinstance(error, SessionNotFoundError):
            return "❌ No drill running in this channel. Start one with `/drill`."

        elif isinstance(error, InvalidSessionStateError):
            if operation == "submit_answer":
                if self.get_session_state(channel_id) == SessionPhase.GAME_ENDED:
                    return "❌ This game is over. Press **Restart** or **Continue** to play again."
                return "❌ This round was already answered. Press **OK** to see the next question."
            if operation == "choose_end_game":
                return "❌ The current game is not over yet."
            return "❌ That action isn't available right now. Check `/status`."

        elif isinstance(error, ValueError):
            return f"❌ Invalid request: {error}"

        else:
            return f"❌ An unexpected error occurred during {operation}. Please try again."

    def _cleanup_session_errors(self, channel_id: int) -> None:
        """
        Clean up error tracking for a specific session.

        Args:
            channel_id: Discord channel identifier
        """
        self._session_errors.pop(channel_id, None)
