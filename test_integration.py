#!/usr/bin/env python3
"""
Simple smoke test for ConfigManager and QuizSession.
"""
from edutainment.config_manager import ConfigManager
from edutainment.models import DrillSettings, SessionPhase
from edutainment.quiz_session import QuizSession

def main():
    print("Testing drill integration...")

    config = ConfigManager()
    print("✓ ConfigManager initialized successfully")

    settings = config.get_drill_settings()
    assert isinstance(settings, DrillSettings)
    assert settings.target_rounds == 5
    print("✓ Default settings are correct")

    assert config.set_default_target_rounds(6)['success'] is True
    assert config.set_default_target_rounds(3)['success'] is False
    print("✓ Round count validation works correctly")

    session = QuizSession(config.get_drill_settings())
    session.start_round()
    for _ in range(6):
        session.submit_answer(str(session.left_factor * session.right_factor))
        summary = session.advance()
    assert summary is not None and summary.final_score == 6
    assert session.phase == SessionPhase.GAME_ENDED
    print("✓ Full game plays through to the summary")

    session.continue_with_score()
    assert session.score == 6 and session.rounds_played == 1
    print("✓ Continue keeps the score")

    print("\n🎉 All integration checks passed!")

if __name__ == "__main__":
    main()
