from typing import Optional, Dict, Tuple

from leadintake.core.config import Settings
from leadintake.models.lead import SubmissionCategory

# Settings attributes consulted in order before falling back to `to_default`
MAILBOX_OVERRIDES: Dict[SubmissionCategory, Tuple[str, ...]] = {
    SubmissionCategory.EARLY_OFFER: ("to_early_offer",),
    SubmissionCategory.FITTING: ("to_book_fitting",),
    SubmissionCategory.EVENTS: ("to_event_floral",),
    SubmissionCategory.REVIEWS: ("to_reviews", "to_feedback"),
    SubmissionCategory.UNRECOGNIZED: (),
}


def resolve_recipient(category: SubmissionCategory, settings: Settings) -> Optional[str]:
    """Mailbox for a category, or None when neither an override nor the default is set"""
    for attr in MAILBOX_OVERRIDES[category]:
        mailbox = getattr(settings, attr)
        if mailbox:
            return mailbox
    return settings.to_default or None
