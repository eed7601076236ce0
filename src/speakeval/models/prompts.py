"""
Prompt Builder

Builds the chat messages sent to the language model for pronunciation
and story evaluation.
"""

from typing import Dict, List, Sequence

from .schemas import PronunciationRequest, StoryRequest


class PromptBuilder:
    """Formats evaluation requests into chat-completion messages."""

    PRONUNCIATION_SYSTEM_PROMPT = (
        "You are an expert English pronunciation evaluator. Respond ONLY with valid JSON. "
        "No additional text or explanations."
    )

    STORY_SYSTEM_PROMPT = (
        "You are an expert English language and creative writing evaluator. "
        "Always respond with valid JSON only."
    )

    PRONUNCIATION_SCHEMA = """{
  "accuracy": (0-100),
  "feedback": "specific, constructive feedback about pronunciation accuracy and areas for improvement",
  "improvements": ["specific pronunciation tips", "areas to focus on"],
  "score_breakdown": {
    "consonants": (0-30),
    "vowels": (0-30),
    "stress": (0-20),
    "fluency": (0-20)
  },
  "grade": "A/B/C/D/F"
}"""

    STORY_SCHEMA = """{
  "overall_score": (0-100),
  "feedback": "comprehensive feedback about the story",
  "strengths": ["list of story strengths"],
  "improvements": ["specific areas to improve"],
  "score_breakdown": {
    "creativity": (0-25),
    "grammar": (0-25),
    "vocabulary": (0-20),
    "coherence": (0-15),
    "keyword_usage": (0-15)
  },
  "detailed_analysis": {
    "plot_development": "analysis of story progression",
    "character_development": "analysis of characters if any",
    "language_use": "analysis of language complexity and correctness",
    "engagement": "how engaging and interesting the story is"
  },
  "grade": "A/B/C/D/F",
  "word_count_bonus": (0-10),
  "time_management_bonus": (0-5)
}"""

    def pronunciation_messages(self, request: PronunciationRequest) -> List[Dict[str, str]]:
        """Messages for scoring one pronunciation attempt."""
        prompt = f"""You are an expert English pronunciation evaluator. Analyze the pronunciation accuracy based on:

Target Word: "{request.target_word}"
User's Pronunciation (transcribed): "{request.transcription}"
Difficulty Level: {request.difficulty}

Evaluate based on:
1. Phonetic accuracy (vowel and consonant sounds)
2. Stress patterns and syllable emphasis
3. Overall clarity and intelligibility
4. Common pronunciation patterns for this word type

Provide evaluation in this exact JSON format (no other text):
{self.PRONUNCIATION_SCHEMA}

Be realistic in scoring - perfect matches get 90-100, close matches get 70-89, partial matches get 50-69, poor matches get 30-49, very poor get 0-29."""

        return self._messages(self.PRONUNCIATION_SYSTEM_PROMPT, prompt)

    def story_messages(self, request: StoryRequest, word_count: int,
                       keywords_used: Sequence[str]) -> List[Dict[str, str]]:
        """
        Messages for scoring a story.

        Args:
            request: The story request
            word_count: Words counted in the story
            keywords_used: Required keywords found in the story
        """
        prompt = f"""You are an English language and creative writing evaluation expert. Evaluate this story based on the given criteria:

Story Prompt: "{request.prompt}"
User's Story: "{request.story}"
Required Keywords: [{', '.join(request.keywords)}]
Keywords Used: [{', '.join(keywords_used)}]
Minimum Words Required: {request.min_words}
Actual Word Count: {word_count}
Difficulty Level: {request.difficulty}
Time Spent: {request.time_spent} seconds (max: {request.max_time} seconds)

Please provide evaluation in the following JSON format:
{self.STORY_SCHEMA}

Consider:
- Creativity and originality
- Grammar and language correctness
- Vocabulary richness and appropriateness
- Story coherence and flow
- Effective use of required keywords
- Appropriate length and completion
- Time management efficiency"""

        return self._messages(self.STORY_SYSTEM_PROMPT, prompt)

    @staticmethod
    def _messages(system_prompt: str, user_prompt: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
