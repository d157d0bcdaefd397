"""
Module Prompts - System prompts and action templates for the four
assistant surfaces (OptiMail, OptiHire, OptiTrip, OptiShop).

Each action is a short task statement plus the list of deliverables the
model must cover. The request's `data` object is rendered underneath the
task as "Label: value" lines, so new data fields need no prompt changes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ActionTemplate:
    task: str
    deliverables: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ModuleConfig:
    name: str
    system_prompt: str
    temperature: float
    max_tokens: int
    actions: Dict[str, ActionTemplate] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# OPTIMAIL
# ---------------------------------------------------------------------------

OPTIMAIL = ModuleConfig(
    name="optimail",
    system_prompt=(
        "You are OptiMail, an email assistant with strong emotional intelligence and "
        "contextual understanding. Compose, reply, summarize and rewrite emails with "
        "the right tone, consider the relationship between sender and recipient, and "
        "keep answers direct, actionable and ready to use."
    ),
    temperature=0.8,
    max_tokens=1500,
    actions={
        "compose": ActionTemplate(
            "Compose a complete email (subject line, greeting, body, closing) with the details below.",
            ("Match the requested tone", "Be concise but comprehensive", "Sound natural and human"),
        ),
        "reply": ActionTemplate(
            "Help me reply to the original email below.",
            ("A concise, direct response", "A more detailed, thoughtful response",
             "A warm, relationship-building response"),
        ),
        "summarize": ActionTemplate(
            "Analyze and summarize the email thread below.",
            ("Key summary (2-3 sentences)", "Main points", "Action items",
             "Next steps", "Important dates or deadlines"),
        ),
        "rewrite": ActionTemplate(
            "Rewrite the email below, keeping the original message and intent.",
            ("Improved clarity and impact", "The requested tone and style"),
        ),
        "tone_analysis": ActionTemplate(
            "Analyze the tone and emotion of the email below.",
            ("Primary emotion", "Sentiment", "Formality level", "Urgency level",
             "2-3 specific suggestions for improvement"),
        ),
        "template": ActionTemplate(
            "Create a reusable email template for the purpose below.",
            ("Placeholders for customization", "Usage tips"),
        ),
        "optimize": ActionTemplate(
            "Optimize the email below for clarity, professionalism and impact.",
            ("The improved version", "An explanation of the changes made"),
        ),
    },
)

# ---------------------------------------------------------------------------
# OPTIHIRE
# ---------------------------------------------------------------------------

OPTIHIRE = ModuleConfig(
    name="optihire",
    system_prompt=(
        "You are OptiHire, a career development and job search assistant. You optimize "
        "resumes and cover letters, prepare users for interviews, suggest career paths "
        "and skill development, and give actionable, evidence-based career advice."
    ),
    temperature=0.7,
    max_tokens=1000,
    actions={
        "resume": ActionTemplate(
            "Optimize this resume for the target position.",
            ("Optimized resume content", "Key improvements made", "ATS optimization tips",
             "Missing elements to add"),
        ),
        "coverletter": ActionTemplate(
            "Create a compelling, personalized cover letter for this application.",
        ),
        "interview": ActionTemplate(
            "Help me prepare for an interview.",
            ("Common interview questions for this role", "STAR method examples",
             "Questions to ask the interviewer", "Key points to highlight",
             "Company research suggestions"),
        ),
        "jobmatch": ActionTemplate(
            "Analyze how well I match this job opportunity.",
            ("Match percentage and reasoning", "Strengths that align", "Gaps to address",
             "How to position myself", "Salary negotiation insights"),
        ),
        "career": ActionTemplate(
            "Provide career development guidance.",
            ("Career path recommendations", "Skills to develop", "Industry trends",
             "Networking strategies", "Timeline and milestones"),
        ),
        "skills": ActionTemplate(
            "Help me plan my skill development.",
            ("Skill gap analysis", "Priority skills", "Learning resources",
             "Timeline for skill acquisition", "How to demonstrate new skills"),
        ),
    },
)

# ---------------------------------------------------------------------------
# OPTITRIP
# ---------------------------------------------------------------------------

OPTITRIP = ModuleConfig(
    name="optitrip",
    system_prompt=(
        "You are OptiTrip, a travel planning assistant. You plan trips, recommend "
        "destinations, build itineraries and budgets, and share local insights, always "
        "balancing the traveler's preferences, budget and safety."
    ),
    temperature=0.7,
    max_tokens=1000,
    actions={
        "plan": ActionTemplate(
            "Help me plan a trip with these details.",
            ("Daily itinerary suggestions", "Accommodation recommendations",
             "Transportation options", "Must-see attractions", "Local dining",
             "Budget breakdown"),
        ),
        "recommend": ActionTemplate(
            "Recommend destinations based on my preferences.",
            ("3-5 destinations with reasons", "Best time to visit", "Estimated costs"),
        ),
        "budget": ActionTemplate(
            "Help me plan the budget for this trip.",
            ("Budget breakdown by category", "Cost-saving tips", "Must-budget vs optional items",
             "Emergency fund recommendation", "Payment and currency tips"),
        ),
        "itinerary": ActionTemplate(
            "Create a detailed day-by-day itinerary for my trip.",
            ("Morning, afternoon and evening plans", "Travel time between stops", "Booking notes"),
        ),
        "local": ActionTemplate(
            "Provide local insights and tips for this destination.",
            ("Customs and etiquette", "Hidden gems", "Safety tips", "Getting around"),
        ),
        "social": ActionTemplate(
            "Help me connect with other travelers and locals.",
            ("Meetups and events", "Community platforms", "Safety guidelines"),
        ),
    },
)

# ---------------------------------------------------------------------------
# OPTISHOP
# ---------------------------------------------------------------------------

OPTISHOP = ModuleConfig(
    name="optishop",
    system_prompt=(
        "You are OptiShop, an intelligent shopping assistant. You research and recommend "
        "products, compare prices, find deals, analyze reviews and build wishlists, "
        "always prioritizing user value, quality and satisfaction."
    ),
    temperature=0.7,
    max_tokens=1000,
    actions={
        "search": ActionTemplate(
            "Find products matching these requirements.",
            ("Top product options", "Key specs and prices", "Where to buy"),
        ),
        "compare": ActionTemplate(
            "Compare these products.",
            ("Side-by-side comparison", "Pros and cons", "Best value pick"),
        ),
        "recommend": ActionTemplate(
            "Recommend products based on my needs and budget.",
            ("Recommendations with reasons", "Budget alternatives"),
        ),
        "analyze": ActionTemplate(
            "Analyze this product and its reviews.",
            ("Quality assessment", "Common complaints", "Value for money", "Verdict"),
        ),
        "wishlist": ActionTemplate(
            "Organize these items into a prioritized wishlist.",
            ("Priority order", "Price tracking suggestions", "Best time to buy"),
        ),
    },
)

MODULES: Dict[str, ModuleConfig] = {
    config.name: config for config in (OPTIMAIL, OPTIHIRE, OPTITRIP, OPTISHOP)
}


def _label(key: str) -> str:
    spaced = "".join(f" {char}" if char.isupper() else char for char in key).replace("_", " ")
    return spaced.strip().capitalize()


def _render_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(_render_value(item) for item in value)
    if isinstance(value, dict):
        return ", ".join(f"{_label(k)}: {_render_value(v)}" for k, v in value.items())
    return str(value)


def build_module_prompt(
    template: ActionTemplate,
    data: Dict[str, Any],
    instructions: Optional[str] = None,
) -> str:
    """Render an action template with the request data."""
    lines = [template.task, ""]
    for key, value in data.items():
        if value in (None, "", [], {}):
            continue
        lines.append(f"{_label(key)}: {_render_value(value)}")

    if instructions:
        lines.extend(["", f"Additional instructions: {instructions}"])

    if template.deliverables:
        lines.extend(["", "Please provide:"])
        lines.extend(f"{index}. {item}" for index, item in enumerate(template.deliverables, start=1))

    return "\n".join(lines)
