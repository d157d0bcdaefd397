"""
Cross-Module Service - Routes work found in an email to another module.

OptiMail text is scanned with three fixed keyword vocabularies. Each
vocabulary is a boolean gate: one keyword anywhere in the text opens it,
and there is no scoring beyond that. An open gate produces one
CrossModuleAction for the matching module, with a payload filled by
best-effort regex extractors.

    email text ──┬── job gate      ──▶ optihire  create_job_from_email
                 ├── travel gate   ──▶ optitrip  create_trip_from_email
                 └── shopping gate ──▶ optishop  track_from_email

Detected actions are registered in a PendingActionRegistry (injected, one
per application) and executed later through execute_cross_module_action().

Usage:
======
    router = CrossModuleRouter(PendingActionRegistry())
    actions = router.analyze_for_cross_module_intent(
        "Your flight to Paris is confirmed, confirmation #ABC123"
    )
    result = await router.execute_cross_module_action(actions[0])
"""

import logging
import re
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import Field

from optigence.ai.intent.schemas import Urgency
from optigence.core.errors import UnknownActionError
from optigence.schemas import CamelModel


logger = logging.getLogger("optigence.services.cross_module")


# ---------------------------------------------------------------------------
# MODELS
# ---------------------------------------------------------------------------

class ActionStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class CrossModuleAction(CamelModel):
    """A unit of work handed from one module to another."""
    id: str
    source_module: str = "optimail"
    target_module: str
    action_type: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    status: ActionStatus = ActionStatus.PENDING
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: Optional[str] = None


class CrossModuleResult(CamelModel):
    success: bool
    data: Optional[Any] = None
    redirect_url: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None


class MeetingDetection(CamelModel):
    has_meeting_request: bool = False
    suggested_duration: int = 30
    suggested_title: str = "Meeting"
    urgency: Urgency = Urgency.MEDIUM
    detected_attendees: List[str] = Field(default_factory=list)


class CrossModuleAnalysis(CamelModel):
    actions: List[CrossModuleAction] = Field(default_factory=list)
    has_meeting_request: bool = False
    meeting: MeetingDetection = Field(default_factory=MeetingDetection)


class ModuleCapability(CamelModel):
    module: str
    actions: List[str]
    data_types: List[str]
    endpoints: List[str]


# ---------------------------------------------------------------------------
# VOCABULARIES
# ---------------------------------------------------------------------------

JOB_KEYWORDS = (
    "job", "position", "hiring", "career", "employment", "vacancy",
    "apply", "resume", "cv", "interview", "candidate", "recruiter",
    "salary", "benefits", "full-time", "part-time", "remote",
)

TRAVEL_KEYWORDS = (
    "flight", "hotel", "booking", "reservation", "trip", "travel",
    "airline", "airport", "departure", "arrival", "itinerary",
    "confirmation", "ticket", "vacation", "business trip",
)

SHOPPING_KEYWORDS = (
    "order", "purchase", "buy", "sale", "deal", "discount",
    "product", "item", "cart", "checkout", "payment", "shipping",
    "delivery", "tracking", "receipt", "invoice",
)

MEETING_KEYWORDS = (
    "meeting", "call", "discussion", "sync", "catch up",
    "conference", "presentation", "demo", "review",
)

MEETING_URGENCY_KEYWORDS = ("urgent", "asap", "immediately", "critical", "important")

DESTINATIONS = (
    "New York", "Los Angeles", "Chicago", "Miami", "Las Vegas", "San Francisco",
    "Boston", "Seattle", "Paris", "London", "Tokyo", "Rome", "Barcelona",
    "Amsterdam", "Berlin", "Madrid", "Sydney", "Dubai",
)

AIRLINES = ("Delta", "United", "American", "Southwest", "JetBlue")
STORES = ("Amazon", "eBay", "Walmart", "Target", "Best Buy", "Apple")

EMAIL_RE = re.compile(r"[\w.%+-]+@[\w.-]+\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"\+?[\d\s\-()]{10,}")
DATE_RE = re.compile(r"\b\d{1,2}/\d{1,2}/\d{4}\b")
CITY_STATE_RE = re.compile(r"\b[A-Z][a-z]+,\s*[A-Z]{2}\b")
COMPANY_LINE_RE = re.compile(r"\b(company|inc|corp)\b", re.IGNORECASE)
SIGNOFF_RE = re.compile(r"^\s*(Regards|Best|Sincerely),?\s*")
CONFIRMATION_RE = re.compile(r"confirmation\s*#?\s*([A-Z0-9]{6,})", re.IGNORECASE)
ORDER_RE = re.compile(r"order\s*#?\s*([A-Z0-9]{6,})", re.IGNORECASE)
TOTAL_RE = re.compile(r"total[:\s]*\$?([\d,]+\.?\d*)", re.IGNORECASE)
TRAVELERS_RE = re.compile(r"(\d+)\s+(passenger|traveler|guest)", re.IGNORECASE)
PRICE_RE = re.compile(r"\$[\d,]+\.?\d*")
URL_RE = re.compile(r"https?://\S+")

DURATION_PATTERNS: Tuple[Tuple[re.Pattern, Callable[[re.Match], int]], ...] = (
    (re.compile(r"(\d+)\s*(?:hour|hr)s?", re.IGNORECASE), lambda m: int(m.group(1)) * 60),
    (re.compile(r"(\d+)\s*(?:minute|min)s?", re.IGNORECASE), lambda m: int(m.group(1))),
    (re.compile(r"half\s*hour", re.IGNORECASE), lambda m: 30),
    (re.compile(r"quick\s*(?:chat|call)", re.IGNORECASE), lambda m: 15),
)

DEFAULT_MEETING_DURATION = 30
MAX_TITLE_LENGTH = 50


def _gate(text: str, keywords: Tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def is_job_related(text: str) -> bool:
    return _gate(text, JOB_KEYWORDS)


def is_travel_related(text: str) -> bool:
    return _gate(text, TRAVEL_KEYWORDS)


def is_shopping_related(text: str) -> bool:
    return _gate(text, SHOPPING_KEYWORDS)


# ---------------------------------------------------------------------------
# EXTRACTORS
# ---------------------------------------------------------------------------

def _first(pattern: re.Pattern, text: str, group: int = 0) -> Optional[str]:
    match = pattern.search(text)
    return match.group(group) if match else None


def _safe_section(name: str, extractor: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
    """Run one extractor; a failure leaves its payload section empty."""
    try:
        return extractor()
    except Exception as e:
        logger.warning(f"Extractor '{name}' failed: {e}")
        return {}


def extract_job_info(content: str, subject: str = "") -> Dict[str, Any]:
    emails = EMAIL_RE.findall(content)

    job_title = subject.strip() if "job" in subject.lower() else None
    if not job_title:
        job_title = next(
            (line.strip() for line in content.splitlines() if "position" in line.lower()),
            None,
        )

    company_line = next(
        (line.strip() for line in content.splitlines() if COMPANY_LINE_RE.search(line)),
        None,
    )

    contact = None
    if emails:
        signoff = next(
            (line for line in content.splitlines() if SIGNOFF_RE.match(line)),
            None,
        )
        name = SIGNOFF_RE.sub("", signoff).strip() if signoff else ""
        contact = {
            "name": name or None,
            "email": emails[0],
            "phone": (_first(PHONE_RE, content) or "").strip() or None,
        }

    return {
        "jobTitle": job_title or None,
        "company": company_line[:MAX_TITLE_LENGTH] if company_line else None,
        "location": _first(CITY_STATE_RE, content),
        "contactInfo": contact,
    }


def extract_travel_info(content: str) -> Dict[str, Any]:
    dates = DATE_RE.findall(content)
    travelers = _first(TRAVELERS_RE, content, group=1)
    return {
        "destination": next((city for city in DESTINATIONS if city in content), None),
        "dates": {
            "departure": dates[0] if dates else None,
            "return": dates[1] if len(dates) > 1 else None,
        },
        "travelers": int(travelers) if travelers else None,
        "bookingInfo": {
            "confirmationNumber": _first(CONFIRMATION_RE, content, group=1),
            "airline": next((airline for airline in AIRLINES if airline in content), None),
        },
    }


def extract_shopping_info(content: str) -> Dict[str, Any]:
    lowered = content.lower()
    if "shipped" in lowered:
        order_status = "shipped"
    elif "delivered" in lowered:
        order_status = "delivered"
    else:
        order_status = "processing"

    total = _first(TOTAL_RE, content, group=1)

    products = []
    for line in content.splitlines():
        if "$" in line and 10 < len(line) < 100:
            products.append({
                "name": PRICE_RE.sub("", line).strip(),
                "price": _first(PRICE_RE, line),
            })
        if len(products) == 5:
            break

    return {
        "orderInfo": {
            "orderNumber": _first(ORDER_RE, content, group=1),
            "total": f"${total}" if total else None,
            "status": order_status,
        },
        "store": {
            "name": next((store for store in STORES if store in content), None),
            "website": _first(URL_RE, content),
        },
        "products": products,
    }


def detect_meeting_request(text: str) -> MeetingDetection:
    """Look for a meeting request and guess its duration, title and attendees."""
    lowered = text.lower()

    duration = DEFAULT_MEETING_DURATION
    for pattern, to_minutes in DURATION_PATTERNS:
        match = pattern.search(text)
        if match:
            duration = to_minutes(match)
            break

    sentence = next(
        (s for s in re.split(r"[.!?]", text) if any(k in s.lower() for k in MEETING_KEYWORDS)),
        "Meeting",
    )
    title = sentence[:MAX_TITLE_LENGTH].strip()
    if len(sentence) > MAX_TITLE_LENGTH:
        title += "..."

    return MeetingDetection(
        has_meeting_request=any(k in lowered for k in MEETING_KEYWORDS),
        suggested_duration=duration,
        suggested_title=title,
        urgency=Urgency.HIGH if any(k in lowered for k in MEETING_URGENCY_KEYWORDS) else Urgency.MEDIUM,
        detected_attendees=EMAIL_RE.findall(text),
    )


# ---------------------------------------------------------------------------
# PENDING ACTIONS
# ---------------------------------------------------------------------------

class PendingActionRegistry:
    """
    In-memory map of cross-module actions keyed by id.

    Bounded: once max_size is reached the oldest entry is evicted.
    """

    def __init__(self, max_size: int = 1000):
        self.max_size = max_size
        self._actions: "OrderedDict[str, CrossModuleAction]" = OrderedDict()

    def add(self, action: CrossModuleAction) -> CrossModuleAction:
        self._actions[action.id] = action
        self._actions.move_to_end(action.id)
        while len(self._actions) > self.max_size:
            evicted, _ = self._actions.popitem(last=False)
            logger.debug(f"Evicted pending action {evicted}")
        return action

    def get(self, action_id: str) -> Optional[CrossModuleAction]:
        return self._actions.get(action_id)

    def update_status(self, action_id: str, status: ActionStatus) -> Optional[CrossModuleAction]:
        """Change the status of a stored action. Unknown ids are left alone."""
        stored = self._actions.get(action_id)
        if stored is None:
            return None
        updated = stored.model_copy(update={"status": status})
        self._actions[action_id] = updated
        return updated

    def list(self, user_id: Optional[str] = None) -> List[CrossModuleAction]:
        actions = list(self._actions.values())
        if user_id:
            return [action for action in actions if action.user_id == user_id]
        return actions

    def remove(self, action_id: str) -> bool:
        return self._actions.pop(action_id, None) is not None

    def __len__(self) -> int:
        return len(self._actions)


# ---------------------------------------------------------------------------
# ROUTER
# ---------------------------------------------------------------------------

MODULE_CAPABILITIES: Dict[str, ModuleCapability] = {
    "optimail": ModuleCapability(
        module="optimail",
        actions=["compose", "send", "analyze", "extract_contact", "schedule_meeting"],
        data_types=["email", "contact", "meeting", "template"],
        endpoints=["/optimail", "/optimail/process", "/optimail/emotion"],
    ),
    "optihire": ModuleCapability(
        module="optihire",
        actions=["create_job", "add_candidate", "schedule_interview", "parse_resume"],
        data_types=["job", "candidate", "interview", "resume"],
        endpoints=["/optihire"],
    ),
    "optitrip": ModuleCapability(
        module="optitrip",
        actions=["create_trip", "search_flights", "book_hotel", "track_expense"],
        data_types=["trip", "flight", "hotel", "expense"],
        endpoints=["/optitrip"],
    ),
    "optishop": ModuleCapability(
        module="optishop",
        actions=["track_product", "compare_prices", "create_wishlist", "track_order"],
        data_types=["product", "price", "wishlist", "order"],
        endpoints=["/optishop"],
    ),
}


@dataclass(frozen=True)
class _Handler:
    redirect_url: str
    message: Callable[[Dict[str, Any]], str]


def _info(payload: Dict[str, Any]) -> Dict[str, Any]:
    return payload.get("extractedInfo") or {}


HANDLERS: Dict[Tuple[str, str], _Handler] = {
    ("optihire", "create_job_from_email"): _Handler(
        "/optihire/jobs/new",
        lambda p: f"Job posting created from email: {_info(p).get('jobTitle') or 'Job Opportunity'}",
    ),
    ("optihire", "add_candidate_from_email"): _Handler(
        "/optihire/candidates/new",
        lambda p: "Candidate added from email",
    ),
    ("optitrip", "create_trip_from_email"): _Handler(
        "/optitrip/trips/new",
        lambda p: f"Trip created from email to {_info(p).get('destination') or 'an unknown destination'}",
    ),
    ("optitrip", "track_booking_from_email"): _Handler(
        "/optitrip/bookings",
        lambda p: "Booking tracked from email",
    ),
    ("optishop", "track_from_email"): _Handler(
        "/optishop/orders",
        lambda p: f"Tracking order from {(_info(p).get('store') or {}).get('name') or 'online store'}",
    ),
    ("optishop", "add_deals_from_email"): _Handler(
        "/optishop/deals",
        lambda p: "Deals added from email",
    ),
}


class CrossModuleRouter:
    """Detects and executes cross-module actions."""

    def __init__(self, registry: PendingActionRegistry):
        self.registry = registry

    def analyze_for_cross_module_intent(
        self,
        text: str,
        thread_content: Optional[str] = None,
        subject: str = "",
        user_id: Optional[str] = None,
        register: bool = True,
    ) -> List[CrossModuleAction]:
        """
        Return one action per module whose vocabulary matches the text.

        With register=False the actions are only returned, not stored as
        pending (used by the live suggestion engine on every keystroke).
        """
        content = " ".join(part for part in (text, thread_content) if part)
        combined = f"{content} {subject}"
        actions = []

        if is_job_related(combined):
            actions.append(self._new_action(
                "job", "optihire", "create_job_from_email", content, subject, user_id,
                lambda: extract_job_info(content, subject),
            ))

        if is_travel_related(combined):
            actions.append(self._new_action(
                "travel", "optitrip", "create_trip_from_email", content, subject, user_id,
                lambda: extract_travel_info(content),
            ))

        if is_shopping_related(combined):
            actions.append(self._new_action(
                "shopping", "optishop", "track_from_email", content, subject, user_id,
                lambda: extract_shopping_info(content),
            ))

        if register:
            for action in actions:
                self.registry.add(action)

        if actions:
            logger.info(f"Cross-module actions detected: {[a.target_module for a in actions]}")
        return actions

    def analyze_email(
        self,
        text: str,
        subject: str = "",
        user_id: Optional[str] = None,
    ) -> CrossModuleAnalysis:
        actions = self.analyze_for_cross_module_intent(text, subject=subject, user_id=user_id)
        meeting = detect_meeting_request(f"{subject}. {text}" if subject else text)
        return CrossModuleAnalysis(
            actions=actions,
            has_meeting_request=meeting.has_meeting_request,
            meeting=meeting,
        )

    def _new_action(
        self,
        prefix: str,
        target_module: str,
        action_type: str,
        content: str,
        subject: str,
        user_id: Optional[str],
        extractor: Callable[[], Dict[str, Any]],
    ) -> CrossModuleAction:
        emails = EMAIL_RE.findall(content)
        return CrossModuleAction(
            id=f"{prefix}_{uuid.uuid4().hex[:12]}",
            target_module=target_module,
            action_type=action_type,
            payload={
                "email": {
                    "subject": subject,
                    "content": content,
                    "sender": emails[0] if emails else None,
                },
                "extractedInfo": _safe_section(prefix, extractor),
            },
            user_id=user_id,
        )

    # -------------------------------------------------------------------------
    # EXECUTION
    # -------------------------------------------------------------------------

    async def execute_cross_module_action(self, action: CrossModuleAction) -> CrossModuleResult:
        """
        Dispatch a registered action by (target module, action type).

        Only the stored copy is executed; fields sent along with the id are
        ignored. An id that is not pending gives a failed result, and so does
        an unknown pair, which also marks the action failed.
        """
        action_id = action.id
        action = self.registry.update_status(action_id, ActionStatus.PROCESSING)
        if action is None:
            return self.unknown_action_result(action_id)

        try:
            handler = self._resolve(action)
        except UnknownActionError as e:
            logger.warning(f"Cross-module action {action.id} failed: {e.message}")
            self.registry.update_status(action.id, ActionStatus.FAILED)
            return CrossModuleResult(success=False, error=e.message)

        self.registry.update_status(action.id, ActionStatus.COMPLETED)
        return CrossModuleResult(
            success=True,
            data=action.payload,
            redirect_url=handler.redirect_url,
            message=handler.message(action.payload),
        )

    @staticmethod
    def unknown_action_result(action_id: str) -> CrossModuleResult:
        logger.warning(f"Refusing to execute {action_id}: not a pending action")
        return CrossModuleResult(success=False, error=f"No pending action with id {action_id}")

    def _resolve(self, action: CrossModuleAction) -> _Handler:
        if action.target_module not in MODULE_CAPABILITIES or action.target_module == "optimail":
            raise UnknownActionError(f"Unknown target module: {action.target_module}")
        handler = HANDLERS.get((action.target_module, action.action_type))
        if handler is None:
            raise UnknownActionError(f"Unknown {action.target_module} action: {action.action_type}")
        return handler

    # -------------------------------------------------------------------------
    # CAPABILITIES
    # -------------------------------------------------------------------------

    def get_module_capabilities(self, name: str) -> Optional[ModuleCapability]:
        return MODULE_CAPABILITIES.get(name)

    def get_all_module_capabilities(self) -> List[ModuleCapability]:
        return list(MODULE_CAPABILITIES.values())
