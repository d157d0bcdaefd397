"""
Email Prompts - System prompt and request formatting for the router.

The router builds one system prompt per request from the classified
intent, the requested tone, any remembered interactions and the emotional
read of the input.
"""

from typing import Optional, Sequence

# ---------------------------------------------------------------------------
# INTENT INSTRUCTIONS
# ---------------------------------------------------------------------------

INTENT_INSTRUCTIONS = {
    "compose": "Create a well-structured, engaging email that accomplishes the user's purpose.",
    "reply": "Generate thoughtful, contextually appropriate reply options that address all points in the original email.",
    "summarize": "Provide a concise summary with key points and action items clearly identified.",
    "rewrite": "Improve the existing content while maintaining the core message and intent.",
    "apology": "Craft a sincere, empathetic apology that acknowledges the issue and offers resolution.",
    "thank_you": "Express genuine gratitude in a warm, appreciative manner.",
    "follow_up": "Write a polite follow-up that restates the open question and proposes a next step.",
    "schedule": "Propose concrete meeting times and keep the logistics clear.",
}

DEFAULT_INSTRUCTION = "Address the user's request with clarity and professionalism."

# Used when every provider failed and static templates are enabled
STATIC_TEMPLATE = """Subject: {subject}

Hi,

{body}

Best regards"""


def build_system_prompt(
    intent: str,
    tone: str,
    memory_snippets: Optional[Sequence[str]] = None,
    dominant_emotion: Optional[str] = None,
    emotion_confidence: Optional[float] = None,
) -> str:
    """Assemble the routing system prompt."""
    parts = [
        "You are OptiMail, an advanced AI email assistant with human-level emotional "
        "intelligence and contextual understanding.",
        "Your responses should be natural, empathetic, and contextually appropriate.",
        f"Always maintain the requested tone: {tone}.",
        INTENT_INSTRUCTIONS.get(intent, DEFAULT_INSTRUCTION),
    ]
    prompt = " ".join(parts)

    if memory_snippets:
        lines = [f"{index}. {snippet}" for index, snippet in enumerate(memory_snippets, start=1)]
        prompt += "\nRelevant context from previous interactions:\n" + "\n".join(lines)

    if dominant_emotion:
        confidence = round((emotion_confidence or 0.0) * 100)
        prompt += (
            f"\nEmotional context: The user's current emotional state appears to be "
            f"{dominant_emotion} with {confidence}% confidence. Adapt your response accordingly."
        )

    prompt += "\nProvide your response in a format ready for immediate use. Include subject line if composing a new email."
    return prompt


def format_request(
    intent: str,
    purpose: str,
    tone: Optional[str] = None,
    original_email: Optional[str] = None,
    email_thread: Optional[str] = None,
) -> str:
    """User-turn message sent to the chosen backend."""
    message = f"Intent: {intent}\nPurpose: {purpose}\n"
    if tone:
        message += f"Desired Tone: {tone}\n"
    if original_email:
        message += f"Original Email:\n{original_email}\n"
    if email_thread:
        message += f"Email Thread:\n{email_thread}\n"
    return message


def render_static_template(purpose: str) -> str:
    """Canned draft used when no provider could answer."""
    subject = purpose.strip().splitlines()[0][:60] if purpose.strip() else "Quick note"
    return STATIC_TEMPLATE.format(
        subject=subject,
        body=f"I wanted to reach out regarding the following: {purpose.strip()}",
    )
