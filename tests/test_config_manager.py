"""
Unit tests for ConfigManager class.
"""
import unittest
import logging

from edutainment.config_manager import ConfigManager
from edutainment.models import DrillSettings


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager functionality."""

    def setUp(self):
        """Set up test fixtures before each test method."""
        self.config_manager = ConfigManager()

        # Suppress logging during tests
        logging.disable(logging.CRITICAL)

    def tearDown(self):
        """Clean up after each test method."""
        logging.disable(logging.NOTSET)

    def test_initialization_with_defaults(self):
        """Test that ConfigManager initializes with correct default values."""
        settings = self.config_manager.get_drill_settings()

        self.assertEqual(settings, DrillSettings(target_rounds=5, min_factor=2, max_factor=12))
        self.assertTrue(self.config_manager.get_reveal_animation())

    def test_get_drill_settings_returns_copy(self):
        """Mutating returned settings does not change the manager."""
        settings = self.config_manager.get_drill_settings()
        settings.target_rounds = 19

        self.assertEqual(self.config_manager.get_default_target_rounds(), 5)

    def test_validate_target_rounds(self):
        """Test the shared round count validation."""
        for value in [5, 12, 20]:
            with self.subTest(value=value):
                self.assertTrue(ConfigManager.validate_target_rounds(value)['success'])

        for value in [4, 21, 0, -1, "10", 7.5, None, False]:
            with self.subTest(value=value):
                result = ConfigManager.validate_target_rounds(value)
                self.assertFalse(result['success'])
                self.assertIn('error', result)
                self.assertTrue(result['user_message'].startswith("❌"))

    def test_set_default_target_rounds(self):
        """Test setting valid and invalid default round counts."""
        result = self.config_manager.set_default_target_rounds(12)
        self.assertTrue(result['success'])
        self.assertEqual(self.config_manager.get_default_target_rounds(), 12)

        result = self.config_manager.set_default_target_rounds(30)
        self.assertFalse(result['success'])
        self.assertEqual(self.config_manager.get_default_target_rounds(), 12)

    def test_set_reveal_animation(self):
        """Test toggling the reveal animation."""
        self.assertTrue(self.config_manager.set_reveal_animation(False)['success'])
        self.assertFalse(self.config_manager.get_reveal_animation())

        result = self.config_manager.set_reveal_animation("yes")
        self.assertFalse(result['success'])
        self.assertFalse(self.config_manager.get_reveal_animation())

    def test_apply_config(self):
        """Test applying the drill section of config.json."""
        errors = self.config_manager.apply_config({
            'drill': {'default_target_rounds': 8, 'reveal_animation': False}
        })

        self.assertEqual(errors, [])
        self.assertEqual(self.config_manager.get_default_target_rounds(), 8)
        self.assertFalse(self.config_manager.get_reveal_animation())

    def test_apply_config_keeps_defaults_on_bad_values(self):
        """Invalid config values are reported and defaults kept."""
        errors = self.config_manager.apply_config({
            'drill': {'default_target_rounds': 50, 'reveal_animation': "no"}
        })

        self.assertEqual(len(errors), 2)
        self.assertEqual(self.config_manager.get_default_target_rounds(), 5)
        self.assertTrue(self.config_manager.get_reveal_animation())

    def test_apply_config_without_drill_section(self):
        """A config without a drill section changes nothing."""
        self.assertEqual(self.config_manager.apply_config({'bot': {}}), [])
        self.assertEqual(self.config_manager.apply_config(None), [])
        self.assertEqual(self.config_manager.get_default_target_rounds(), 5)

    def test_reset_to_defaults(self):
        """Test resetting all settings."""
        self.config_manager.set_default_target_rounds(15)
        self.config_manager.set_reveal_animation(False)

        self.config_manager.reset_to_defaults()

        self.assertEqual(self.config_manager.get_default_target_rounds(), 5)
        self.assertTrue(self.config_manager.get_reveal_animation())

    def test_validate_settings(self):
        """Test validation of current settings."""
        validation = self.config_manager.validate_settings()
        self.assertTrue(validation['valid'])
        self.assertEqual(validation['issues'], [])

        # Simulate corrupted state
        self.config_manager._global_settings.target_rounds = 2
        validation = self.config_manager.validate_settings()
        self.assertFalse(validation['valid'])
        self.assertIn("Invalid target rounds: 2", validation['issues'])

    def test_get_settings_summary(self):
        """Test settings summary formatting."""
        self.config_manager.set_default_target_rounds(15)
        summary = self.config_manager.get_settings_summary()

        self.assertIn("Rounds per game: 15", summary)
        self.assertIn("Factors: 2 to 12", summary)
        self.assertIn("Reveal animation: on", summary)


if __name__ == '__main__':
    unittest.main()
