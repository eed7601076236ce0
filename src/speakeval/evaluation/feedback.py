"""
Feedback Templates

Static learner-facing messages keyed by feedback tier or score band.
"""

from ..scoring.similarity import FeedbackTier

PRONUNCIATION_TIER_MESSAGES = {
    FeedbackTier.HIGH: "Great job!",
    FeedbackTier.MEDIUM: "Good effort, keep practicing.",
    FeedbackTier.LOW: "Needs more practice. Focus on clear pronunciation.",
}

PRONUNCIATION_STRENGTHS = ["Clear articulation"]
PRONUNCIATION_IMPROVEMENTS = ["Practice pronunciation", "Speak more clearly"]
PHONETIC_ANALYSIS_NOTE = "Automated analysis based on transcription similarity"

# Strengths/improvements switch at 70, not at a tier boundary
PRONUNCIATION_STRENGTH_THRESHOLD = 70

STORY_STRENGTHS = ["Adequate length"]
STORY_IMPROVEMENTS = ["Write longer stories"]

STORY_DETAILED_ANALYSIS = {
    "plot_development": "Automated analysis - basic story structure detected",
    "character_development": "Automated analysis - character elements present",
    "language_use": "Automated analysis - standard language usage",
    "engagement": "Automated analysis - engaging content",
}


def pronunciation_feedback(accuracy: int, tier: FeedbackTier) -> str:
    return (
        f"Based on transcription analysis, your pronunciation accuracy is {accuracy}%. "
        f"{PRONUNCIATION_TIER_MESSAGES[FeedbackTier(tier)]}"
    )


def story_closing_message(overall_score: int) -> str:
    if overall_score >= 80:
        return "Well done!"
    if overall_score >= 60:
        return "Good effort!"
    return "Keep practicing your storytelling skills."


def story_feedback(word_count: int, keywords_used: int, keywords_total: int,
                   overall_score: int) -> str:
    return (
        f"Your story has {word_count} words and uses {keywords_used} of {keywords_total} "
        f"required keywords. {story_closing_message(overall_score)}"
    )
