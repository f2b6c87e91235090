"""
Configuration manager for Edutainment drill settings and parameters.
"""
import logging
from typing import Dict, Any, List

from .models import DrillSettings


class ConfigManager:
    """Manages bot configuration settings and drill parameters."""

    # Default configuration values
    DEFAULT_TARGET_ROUNDS = 5
    DEFAULT_REVEAL_ANIMATION = True

    # Validation limits
    MIN_TARGET_ROUNDS = 5
    MAX_TARGET_ROUNDS = 20
    MIN_FACTOR = 2
    MAX_FACTOR = 12

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._global_settings = DrillSettings(
            target_rounds=self.DEFAULT_TARGET_ROUNDS,
            min_factor=self.MIN_FACTOR,
            max_factor=self.MAX_FACTOR
        )
        self._reveal_animation = self.DEFAULT_REVEAL_ANIMATION

    @classmethod
    def validate_target_rounds(cls, rounds: Any) -> Dict[str, Any]:
        """
        Check a requested round count against the allowed range.

        Args:
            rounds: Requested number of rounds per game

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        logger = logging.getLogger(__name__)

        # bool is an int subclass but never a valid round count
        if not isinstance(rounds, int) or isinstance(rounds, bool):
            error_msg = f"Target rounds must be an integer, got {type(rounds).__name__}"
            logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(rounds).__name__}"
            }

        if rounds < cls.MIN_TARGET_ROUNDS:
            error_msg = f"Target rounds must be at least {cls.MIN_TARGET_ROUNDS}"
            logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Too few rounds: Minimum is {cls.MIN_TARGET_ROUNDS}"
            }

        if rounds > cls.MAX_TARGET_ROUNDS:
            error_msg = f"Target rounds cannot exceed {cls.MAX_TARGET_ROUNDS}"
            logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Too many rounds: Maximum is {cls.MAX_TARGET_ROUNDS}"
            }

        return {
            'success': True,
            'message': f"Target rounds {rounds} is valid",
            'user_message': f"✅ {rounds} rounds per game"
        }

    def get_drill_settings(self) -> DrillSettings:
        """
        Get current drill settings.

        Returns:
            DrillSettings object with current configuration
        """
        return DrillSettings(
            target_rounds=self._global_settings.target_rounds,
            min_factor=self._global_settings.min_factor,
            max_factor=self._global_settings.max_factor
        )

    def set_default_target_rounds(self, rounds: int) -> Dict[str, Any]:
        """
        Set the number of rounds used for newly started drills.

        Args:
            rounds: Number of rounds per game

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        result = self.validate_target_rounds(rounds)
        if not result['success']:
            return result

        self._global_settings.target_rounds = rounds
        self.logger.info(f"Default target rounds set to {rounds}")
        return {
            'success': True,
            'message': f"Default target rounds set to {rounds}",
            'user_message': f"✅ New drills will last {rounds} rounds"
        }

    def get_default_target_rounds(self) -> int:
        """
        Get current default round count.

        Returns:
            Number of rounds per game for new drills
        """
        return self._global_settings.target_rounds

    def set_reveal_animation(self, enabled: bool) -> Dict[str, Any]:
        """
        Enable or disable the staggered reveal of each new question.

        Args:
            enabled: True to animate question reveal, False to show it at once

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(enabled, bool):
            error_msg = f"Reveal animation must be a boolean, got {type(enabled).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected true/false, got {type(enabled).__name__}"
            }

        self._reveal_animation = enabled
        state = "enabled" if enabled else "disabled"
        self.logger.info(f"Reveal animation {state}")
        return {
            'success': True,
            'message': f"Reveal animation {state}",
            'user_message': f"✅ Question reveal animation {state}"
        }

    def get_reveal_animation(self) -> bool:
        """Check whether questions are revealed with the staggered animation."""
        return self._reveal_animation

    def apply_config(self, config: Dict[str, Any]) -> List[str]:
        """
        Apply the drill section of a loaded config.json.

        Args:
            config: Parsed configuration dictionary

        Returns:
            List of error messages for values that were rejected
        """
        drill_config = (config or {}).get('drill', {})
        errors = []

        if 'default_target_rounds' in drill_config:
            result = self.set_default_target_rounds(drill_config['default_target_rounds'])
            if not result['success']:
                errors.append(result['error'])

        if 'reveal_animation' in drill_config:
            result = self.set_reveal_animation(drill_config['reveal_animation'])
            if not result['success']:
                errors.append(result['error'])

        if errors:
            self.logger.warning(f"Configuration applied with {len(errors)} rejected value(s), defaults kept")
        else:
            self.logger.info("Configuration applied successfully")
        return errors

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        self._global_settings = DrillSettings(
            target_rounds=self.DEFAULT_TARGET_ROUNDS,
            min_factor=self.MIN_FACTOR,
            max_factor=self.MAX_FACTOR
        )
        self._reveal_animation = self.DEFAULT_REVEAL_ANIMATION
        self.logger.info("All settings reset to default values")

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }

        target_rounds = self._global_settings.target_rounds
        if (not isinstance(target_rounds, int) or
            target_rounds < self.MIN_TARGET_ROUNDS or
            target_rounds > self.MAX_TARGET_ROUNDS):
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid target rounds: {target_rounds}")

        if (self._global_settings.min_factor != self.MIN_FACTOR or
            self._global_settings.max_factor != self.MAX_FACTOR):
            validation_result["valid"] = False
            validation_result["issues"].append(
                f"Invalid factor range: [{self._global_settings.min_factor}, {self._global_settings.max_factor}]"
            )

        if not isinstance(self._reveal_animation, bool):
            validation_result["valid"] = False
            validation_result["issues"].append(
                f"Invalid reveal animation setting: {self._reveal_animation}"
            )

        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        return (
            f"Drill Settings:\n"
            f"• Rounds per game: {self._global_settings.target_rounds}\n"
            f"• Factors: {self._global_settings.min_factor} to {self._global_settings.max_factor}\n"
            f"• Reveal animation: {'on' if self._reveal_animation else 'off'}"
        )
