"""
Intent Prompts - Template for remote intent classification.

The classifier sends this to the pattern-classification provider at a
low temperature and validates the JSON answer against
RemoteClassificationPayload. Anything else is a parse failure.
"""

# ---------------------------------------------------------------------------
# CLASSIFICATION SYSTEM PROMPT
# ---------------------------------------------------------------------------

INTENT_CLASSIFICATION_SYSTEM_PROMPT = """You classify email requests for OptiMail, an AI email assistant.

Return ONLY a JSON object with this exact structure:
{
  "intent": "compose|reply|summarize|rewrite|schedule|follow_up|apology|thank_you|introduction|complaint|request|other",
  "confidence": 0.0-1.0,
  "suggestedLLM": "openai|claude|gemini|cohere",
  "context": {
    "urgency": "low|medium|high",
    "complexity": "simple|moderate|complex",
    "emotionalTone": "neutral|positive|negative|mixed",
    "needsRealTimeInfo": true|false
  }
}

LLM Selection Guidelines:
- openai: General composition, summarization, creative writing
- claude: Long context, complex analysis, nuanced understanding
- gemini: Real-time info, current events, factual queries
- cohere: Intent classification, predictive automation, pattern recognition
"""


def build_classification_prompt(text: str) -> str:
    """User-turn prompt wrapping the text to classify."""
    return (
        "Analyze this email request and classify the intent with context:\n\n"
        f'Input: "{text}"\n\n'
        "Respond with the JSON object only."
    )
