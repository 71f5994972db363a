"""
Lead intake workflow.

A submission moves through these stages, any of which can end the request
with a `LeadIntakeError`:

    received -> body parsed -> validated -> challenge checked -> routed
             -> composed -> dispatched -> replied (optional) -> completed

Nothing is kept between requests; each call to `LeadIntakeService.handle`
opens its own HTTP client and discards everything when it returns.
"""

import logging
from typing import Optional
from urllib.parse import parse_qsl

import httpx

from leadintake.core import composer
from leadintake.core.config import Settings
from leadintake.core.errors import (
    ChallengeRejected,
    DispatchFailed,
    MalformedBody,
    MissingCategory,
    MissingChallenge,
    MissingConfiguration,
    MissingEmail,
    UnrecognizedCategory,
    UnroutableCategory,
)
from leadintake.core.resend import ResendMailer
from leadintake.core.routing import resolve_recipient
from leadintake.core.turnstile import TurnstileVerifier
from leadintake.models.lead import (
    IntakeResult,
    RawSubmission,
    RequestMeta,
    SubmissionCategory,
    ValidationOutcome,
)

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MAX_FORM_FIELDS = 100
HIGH_RATING = 4


def parse_form_body(body: bytes, content_type: Optional[str] = None) -> RawSubmission:
    """
    Decode an urlencoded form body into a flat field map.

    Last value wins for repeated keys; values are stripped. Anything that is
    not urlencoded form data raises `MalformedBody`.
    """
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type != FORM_CONTENT_TYPE:
        raise MalformedBody(details={"content_type": media_type or None})

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        raise MalformedBody(details="body is not valid UTF-8")

    text = text.strip().strip("&")
    if not text:
        return RawSubmission()

    try:
        pairs = parse_qsl(
            text,
            keep_blank_values=True,
            strict_parsing=True,
            errors="strict",
            max_num_fields=MAX_FORM_FIELDS,
        )
    except ValueError as e:
        raise MalformedBody(details=str(e))

    return RawSubmission(fields={key.strip(): value.strip() for key, value in pairs})


def validate_submission(submission: RawSubmission) -> ValidationOutcome:
    """
    Required fields per category.

    High-rating reviews (4 stars and up) need neither an email nor a challenge
    token; every other recognized category needs both.
    """
    if not submission.form_type:
        raise MissingCategory()

    category = submission.category
    if category is SubmissionCategory.UNRECOGNIZED:
        raise UnrecognizedCategory(details={"formType": submission.form_type})

    if category is SubmissionCategory.REVIEWS and submission.rating is not None and submission.rating >= HIGH_RATING:
        return ValidationOutcome(category=category, challenge_required=False)

    if not submission.email:
        raise MissingEmail()
    if not submission.challenge_token:
        raise MissingChallenge()

    return ValidationOutcome(category=category)


class LeadIntakeService:
    """
    Runs one submission through the workflow.

    `settings` is injected at construction; `transport` lets tests swap in
    an `httpx.MockTransport` in place of the network.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.outbound_timeout, transport=self.transport)

    async def handle(self, body: bytes, content_type: Optional[str], meta: RequestMeta) -> IntakeResult:
        settings = self.settings

        missing = settings.missing_required()
        if missing:
            logger.error(f"❌ Lead intake misconfigured, missing: {', '.join(missing)}")
            raise MissingConfiguration(details={"missing": missing})

        submission = parse_form_body(body, content_type)
        outcome = validate_submission(submission)
        category = outcome.category
        logger.info(f"Lead submission received: formType={category.value}")

        async with self._client() as client:
            if outcome.challenge_required:
                verifier = TurnstileVerifier(
                    secret_key=settings.turnstile_secret_key,
                    verify_url=settings.turnstile_verify_url,
                    client=client,
                )
                challenge = await verifier.verify(submission.challenge_token, meta.ip)
                if not challenge.verified:
                    raise ChallengeRejected(details=challenge.details)
            else:
                logger.info("⏭️ Turnstile skipped for high-rating review")

            to = resolve_recipient(category, settings)
            if not to:
                logger.error(f"❌ No mailbox configured for formType={category.value}")
                raise UnroutableCategory(details={"formType": category.value})

            notification = composer.compose_notification(submission, meta, to)
            auto_reply = composer.compose_auto_reply(submission, settings)

            mailer = ResendMailer(
                api_key=settings.resend_api_key,
                from_email=settings.resend_from_email,
                from_name=settings.resend_from_name,
                api_url=settings.resend_api_url,
                unsubscribe_mailto=settings.unsubscribe_mailto,
                client=client,
            )

            sent = await mailer.send(notification)
            if not sent.sent:
                raise DispatchFailed(details=sent.details)
            logger.info(f"✅ Lead notification sent for formType={category.value}")

            result = IntakeResult(category=category, notification=sent)
            if auto_reply is not None:
                result.auto_reply = await mailer.send(auto_reply)
                if not result.auto_reply.sent:
                    # Lead already reached staff; the submitter is not told
                    logger.warning(f"⚠️ Auto-reply failed for formType={category.value}: {result.auto_reply.details}")

        return result
