"""
Plain-text email composition for lead submissions.

Pure functions: no network, no clock, no randomness. Every caller-supplied
value goes through `clean_line` / `clean_block` before it is interpolated,
and optional values render as a placeholder so the recipient always sees
the same line structure.
"""

import re
from email.utils import parseaddr
from typing import Callable, Dict, List, Optional

from leadintake.core.config import Settings
from leadintake.models.lead import (
    NotificationMessage,
    PreferredSlot,
    RawSubmission,
    RequestMeta,
    SubmissionCategory,
)

NOT_PROVIDED = "(not provided)"
NOT_SPECIFIED = "(not specified)"
NONE = "(none)"
UNKNOWN = "(unknown)"
NO_TIME = "(no time)"

MAX_PREFERRED_SLOTS = 3

EARLY_OFFER_CODES = (("$50", "$5", "VERO5"), ("$100", "$10", "VERO10"))
EARLY_OFFER_EXPIRY = "04/05/2026"

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


def clean_line(value: Optional[str], placeholder: str = "") -> str:
    """Single-line value: line breaks folded to spaces, control chars dropped"""
    text = _LINE_BREAKS.sub(" ", value or "")
    text = _CONTROL_CHARS.sub("", text).replace("\t", " ").strip()
    return text or placeholder


def clean_block(value: Optional[str], placeholder: str = "") -> str:
    """Multi-line value: newlines normalized, other control chars dropped"""
    text = (value or "").replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS.sub("", text).strip()
    return text or placeholder


def preferred_slots(submission: RawSubmission) -> List[PreferredSlot]:
    slots = []
    for n in range(1, MAX_PREFERRED_SLOTS + 1):
        date = clean_line(submission.get(f"preferredDate{n}"))
        if date:
            time = clean_line(submission.get(f"preferredTime{n}")) or None
            slots.append(PreferredSlot(date=date, time=time))
    return slots


def format_slots(slots: List[PreferredSlot]) -> List[str]:
    if not slots:
        return [f"  {NOT_PROVIDED}"]
    return [
        f"  Option {i}: {slot.date} at {slot.time or NO_TIME}"
        for i, slot in enumerate(slots, start=1)
    ]


def build_subject(submission: RawSubmission) -> str:
    if submission.category is SubmissionCategory.REVIEWS:
        return "Review message"
    form_type = clean_line(submission.form_type)
    email = clean_line(submission.email, NOT_PROVIDED)
    return f"[{form_type}] New Lead from {email}"


def _category_lines(submission: RawSubmission) -> List[str]:
    category = submission.category
    if category is SubmissionCategory.REVIEWS:
        rating = submission.rating
        return [
            f"Rating: {rating}/5" if rating is not None else f"Rating: {NOT_PROVIDED}",
            f"Review Source: {clean_line(submission.get('source'), NOT_PROVIDED)}",
        ]
    if category is SubmissionCategory.FITTING:
        return [
            f"Dress Type: {clean_line(submission.get('eventType'), NOT_SPECIFIED)}",
            "Preferred Dates & Times:",
            *format_slots(preferred_slots(submission)),
        ]
    return []


def build_notification_text(submission: RawSubmission, meta: RequestMeta) -> str:
    lines = [
        f"Form Type: {clean_line(submission.form_type)}",
        f"Email: {clean_line(submission.email, NOT_PROVIDED)}",
        f"Name: {clean_line(submission.display_name, NOT_PROVIDED)}",
        f"Phone: {clean_line(submission.get('phone'), NOT_PROVIDED)}",
    ]
    lines.extend(_category_lines(submission))
    lines.extend([
        "",
        "Message:",
        clean_block(submission.get("message"), NONE),
        "",
        "Meta:",
        f"IP: {clean_line(meta.ip, UNKNOWN)}",
        f"User-Agent: {clean_line(meta.user_agent, UNKNOWN)}",
        f"Referer: {clean_line(meta.referer, UNKNOWN)}",
    ])
    return "\n".join(lines)


def reply_address(value: Optional[str]) -> Optional[str]:
    """The address if it is a plain addr-spec, else None"""
    email = clean_line(value)
    name, address = parseaddr(email)
    if name or address != email or address.count("@") != 1 or " " in address:
        return None
    local, domain = address.split("@")
    if not local or "." not in domain or domain.startswith(".") or domain.endswith("."):
        return None
    return address


def compose_notification(submission: RawSubmission, meta: RequestMeta, to: str) -> NotificationMessage:
    """Internal message for staff.

    `reply_to` is only set for a plain addr-spec; a malformed address
    still appears in the body.
    """
    return NotificationMessage(
        to=to,
        subject=build_subject(submission),
        text=build_notification_text(submission, meta),
        reply_to=reply_address(submission.email),
    )


def _signature(settings: Settings) -> str:
    return f"{settings.site_legal_name}\n{settings.site_location}\nNavigation: {settings.site_maps_url}"


def _early_offer_reply(submission: RawSubmission, settings: Settings) -> NotificationMessage:
    first_name = clean_line(submission.get("firstName"))
    greeting = f"Hi {first_name}!" if first_name else "Hi!"
    rewards = "\n".join(
        f"✅ Spend {spend}+ → get {back} back (Use code {code})"
        for spend, back, code in EARLY_OFFER_CODES
    )
    codes = " or ".join(code for _, _, code in EARLY_OFFER_CODES)
    text = f"""{greeting}

Thanks for joining our Early Offer list. Here's your reward for Grand Opening:

{rewards}

How to redeem:
1) Use code {codes} at checkout
2) Offer applies to qualifying purchase totals (before tax)
3) One offer per customer during the promotion window

We can't wait to see you,
{_signature(settings)}

---

Fine Print: This offer is valid based on your consent to receive promotional emails from {settings.site_name}. Offer expires {EARLY_OFFER_EXPIRY}. Cannot be combined with other offers. See terms of service for details.

If you don't want early offer emails, reply 'unsubscribe'."""
    return NotificationMessage(
        to=clean_line(submission.email),
        subject=f"Your Exclusive Early Offer - {settings.site_name}",
        text=text,
        is_courtesy=True,
    )


def _fitting_reply(submission: RawSubmission, settings: Settings) -> NotificationMessage:
    full_name = clean_line(submission.get("fullName")) or clean_line(submission.display_name)
    slots = "\n".join(format_slots(preferred_slots(submission)))
    text = f"""Hi {full_name or "there"}!

We received your appointment request. Thank you for choosing {settings.site_name} for your dress fitting!

This is a request to schedule an appointment. We'll confirm your preferred time within 24 hours.

--- YOUR REQUEST ---

Full Name: {full_name or NOT_PROVIDED}
Email: {clean_line(submission.email)}
Phone: {clean_line(submission.get("phone"), NOT_PROVIDED)}

Dress Type: {clean_line(submission.get("eventType"), NOT_SPECIFIED)}

Preferred Dates & Times:
{slots}

Additional Notes:
{clean_block(submission.get("message"), NONE)}

--- NEXT STEPS ---

We'll reach out to confirm your appointment within 24 hours.

If you need to reschedule or have urgent questions, please reply to this email or call us directly.

We look forward to meeting you!

{_signature(settings)}"""
    return NotificationMessage(
        to=clean_line(submission.email),
        subject=f"Appointment Request Received — {settings.site_legal_name}",
        text=text,
        is_courtesy=True,
    )


def _events_reply(submission: RawSubmission, settings: Settings) -> NotificationMessage:
    name = clean_line(submission.get("name")) or clean_line(submission.display_name)
    text = f"""Hi {name or "there"}!

We received your event planning and floral design consultation request. Thank you for thinking of {settings.site_name}!

This is a consultation inquiry. We'll reach out to discuss your vision and availability within 24 hours.

--- YOUR REQUEST ---

Full Name: {name or NOT_PROVIDED}
Email: {clean_line(submission.email)}
Phone: {clean_line(submission.get("phone"), NOT_PROVIDED)}

Consultation Details:
{clean_block(submission.get("message"), NONE)}

--- NEXT STEPS ---

Our events & florals team will contact you within 24 hours to discuss:
• Your event vision and style preferences
• Available dates and timeline
• Floral arrangements and décor options
• Pricing and packages

If you have urgent questions or need to reach us faster, please reply to this email or call us directly.

We're excited to help bring your vision to life!

{_signature(settings)}"""
    return NotificationMessage(
        to=clean_line(submission.email),
        subject=f"Consultation Request Received — {settings.site_legal_name}",
        text=text,
        is_courtesy=True,
    )


AutoReplyTemplate = Callable[[RawSubmission, Settings], NotificationMessage]

AUTO_REPLIES: Dict[SubmissionCategory, Optional[AutoReplyTemplate]] = {
    SubmissionCategory.EARLY_OFFER: _early_offer_reply,
    SubmissionCategory.FITTING: _fitting_reply,
    SubmissionCategory.EVENTS: _events_reply,
    SubmissionCategory.REVIEWS: None,
    SubmissionCategory.UNRECOGNIZED: None,
}


def compose_auto_reply(submission: RawSubmission, settings: Settings) -> Optional[NotificationMessage]:
    """Courtesy message for the submitter, if the category has one and there is an address to send to"""
    template = AUTO_REPLIES[submission.category]
    if template is None or not clean_line(submission.email):
        return None
    return template(submission, settings)
