"""Unit tests for form body decoding and per-category field validation."""

import pytest

from leadintake.core.errors import (
    MalformedBody,
    MissingCategory,
    MissingChallenge,
    MissingEmail,
    UnrecognizedCategory,
)
from leadintake.core.intake import parse_form_body, validate_submission
from leadintake.models.lead import RawSubmission, SubmissionCategory

FORM = "application/x-www-form-urlencoded"


def submission(**fields) -> RawSubmission:
    return RawSubmission(fields=fields)


class TestParseFormBody:
    """Test urlencoded body decoding."""

    def test_decodes_fields(self):
        parsed = parse_form_body(b"formType=fitting&email=a%40x.com&message=hello+there", FORM)
        assert parsed.fields == {"formType": "fitting", "email": "a@x.com", "message": "hello there"}

    def test_last_value_wins(self):
        parsed = parse_form_body(b"email=first%40x.com&email=second%40x.com", FORM)
        assert parsed.get("email") == "second@x.com"

    def test_values_are_trimmed(self):
        parsed = parse_form_body(b"name=++Vero++&phone=%20555-0100%0A", FORM)
        assert parsed.get("name") == "Vero"
        assert parsed.get("phone") == "555-0100"

    def test_content_type_parameters_are_allowed(self):
        parsed = parse_form_body(b"formType=events", f"{FORM}; charset=UTF-8")
        assert parsed.form_type == "events"

    def test_blank_values_are_kept(self):
        parsed = parse_form_body(b"formType=events&phone=", FORM)
        assert parsed.fields["phone"] == ""

    def test_empty_body_is_an_empty_submission(self):
        assert parse_form_body(b"", FORM).fields == {}

    def test_json_content_type_is_malformed(self):
        with pytest.raises(MalformedBody):
            parse_form_body(b'{"formType": "fitting"}', "application/json")

    def test_missing_content_type_is_malformed(self):
        with pytest.raises(MalformedBody):
            parse_form_body(b"formType=fitting", None)

    def test_field_without_value_separator_is_malformed(self):
        with pytest.raises(MalformedBody):
            parse_form_body(b'{"formType": "fitting"}', FORM)

    def test_invalid_utf8_is_malformed(self):
        with pytest.raises(MalformedBody):
            parse_form_body(b"name=\xff\xfe", FORM)

    def test_invalid_percent_encoded_utf8_is_malformed(self):
        with pytest.raises(MalformedBody):
            parse_form_body(b"name=%FF%FE", FORM)

    def test_too_many_fields_is_malformed(self):
        body = "&".join(f"f{i}=x" for i in range(500)).encode()
        with pytest.raises(MalformedBody):
            parse_form_body(body, FORM)


class TestValidateSubmission:
    """Test required fields per category."""

    def test_missing_form_type(self):
        with pytest.raises(MissingCategory):
            validate_submission(submission(email="a@x.com", **{"cf-turnstile-response": "tok"}))

    def test_unrecognized_form_type(self):
        with pytest.raises(UnrecognizedCategory) as exc_info:
            validate_submission(submission(formType="newsletter", email="a@x.com"))
        assert exc_info.value.details == {"formType": "newsletter"}

    def test_form_type_is_case_insensitive(self):
        outcome = validate_submission(
            submission(formType="FITTING", email="a@x.com", **{"cf-turnstile-response": "tok"})
        )
        assert outcome.category is SubmissionCategory.FITTING
        assert outcome.challenge_required is True

    @pytest.mark.parametrize("form_type", ["early_offer", "fitting", "events", "reviews"])
    def test_email_required(self, form_type):
        with pytest.raises(MissingEmail):
            validate_submission(submission(formType=form_type, **{"cf-turnstile-response": "tok"}))

    @pytest.mark.parametrize("form_type", ["early_offer", "fitting", "events", "reviews"])
    def test_challenge_required(self, form_type):
        with pytest.raises(MissingChallenge):
            validate_submission(submission(formType=form_type, email="a@x.com"))

    @pytest.mark.parametrize("rating", ["4", "5", "10", "04"])
    def test_high_rating_review_is_exempt(self, rating):
        outcome = validate_submission(submission(formType="reviews", rating=rating))
        assert outcome.category is SubmissionCategory.REVIEWS
        assert outcome.challenge_required is False

    @pytest.mark.parametrize("rating", ["1", "2", "3", "", "five", "4.5", "+4", "4_0", "\u0665", "-5"])
    def test_other_ratings_need_email_and_challenge(self, rating):
        with pytest.raises(MissingEmail):
            validate_submission(submission(formType="reviews", rating=rating))

    def test_high_rating_does_not_exempt_other_categories(self):
        with pytest.raises(MissingEmail):
            validate_submission(submission(formType="events", rating="5"))

    def test_email_format_is_not_checked(self):
        outcome = validate_submission(
            submission(formType="events", email="not-an-email", **{"cf-turnstile-response": "tok"})
        )
        assert outcome.category is SubmissionCategory.EVENTS
