"""
Lead submission models.
Everything here lives for a single request: the decoded form, the
verification and dispatch outcomes, and the composed messages.
"""

from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


class SubmissionCategory(str, Enum):
    """Form kinds accepted by the intake endpoint (value = `formType` on the wire)"""
    EARLY_OFFER = "early_offer"   # promotional signup
    FITTING = "fitting"           # appointment request
    EVENTS = "events"             # event / floral consultation
    REVIEWS = "reviews"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_form_type(cls, form_type: str) -> "SubmissionCategory":
        value = (form_type or "").strip().lower()
        for category in cls:
            if category is not cls.UNRECOGNIZED and category.value == value:
                return category
        return cls.UNRECOGNIZED


class RequestMeta(BaseModel):
    """Caller details taken from the request headers"""
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    referer: Optional[str] = None
    accept: Optional[str] = None

    @property
    def wants_json(self) -> bool:
        return "application/json" in (self.accept or "")


class RawSubmission(BaseModel):
    """Decoded form body. Every value is untrusted caller text."""
    fields: Dict[str, str] = Field(default_factory=dict)

    def get(self, key: str) -> str:
        return self.fields.get(key, "")

    @property
    def form_type(self) -> str:
        return self.get("formType").lower()

    @property
    def category(self) -> SubmissionCategory:
        return SubmissionCategory.from_form_type(self.form_type)

    @property
    def email(self) -> str:
        return self.get("email").lower()

    @property
    def challenge_token(self) -> str:
        return self.get("cf-turnstile-response")

    @property
    def rating(self) -> Optional[int]:
        value = self.get("rating")
        # plain ASCII digits only
        if not (value.isascii() and value.isdigit()):
            return None
        return int(value)

    @property
    def display_name(self) -> str:
        parts = [self.get("firstName"), self.get("lastName")]
        joined = " ".join(p for p in parts if p)
        return joined or self.get("fullName") or self.get("name")


class ValidationOutcome(BaseModel):
    """Result of field validation. `challenge_required` is False only on the high-rating review path."""
    category: SubmissionCategory
    challenge_required: bool = True


class ChallengeResult(BaseModel):
    verified: bool
    details: Optional[Any] = None


class PreferredSlot(BaseModel):
    date: str
    time: Optional[str] = None


class NotificationMessage(BaseModel):
    to: str
    subject: str
    text: str
    reply_to: Optional[str] = None
    is_courtesy: bool = False  # auto-replies carry the unsubscribe headers


class DispatchOutcome(BaseModel):
    sent: bool
    status_code: Optional[int] = None
    details: Optional[Any] = None


class IntakeResult(BaseModel):
    """Returned by the intake service once the primary notification went out"""
    category: SubmissionCategory
    notification: DispatchOutcome
    auto_reply: Optional[DispatchOutcome] = None

    @property
    def auto_reply_status(self) -> str:
        if self.auto_reply is None:
            return "skipped"
        return "sent" if self.auto_reply.sent else "failed"


class HealthReport(BaseModel):
    status: str = "ok"
    env_vars: Dict[str, bool] = Field(default_factory=dict)
