"""
Property-based tests with Hypothesis for the pure helpers behind tipping,
ratings and request validation.
"""

import math
import re
from fractions import Fraction

import pytest
from hypothesis import given, settings, strategies as st

from tipsy_shared.utils.exceptions import ValidationError
from tipsy_shared.utils.tipping_schemas import TIP_ERROR_CODES, TipCreate
from tipsy_shared.utils.validators import escape_like_pattern, normalize_email, parse_body
from tipsy_api.services.domain.staff_service import generate_qr_slug
from tipsy_api.services.domain.stats import average_cents, average_rating
from tipsy_api.services.domain.tip_service import tip_notification_body


ratings = st.lists(st.integers(min_value=1, max_value=5), min_size=1, max_size=200)


class TestRatingProperties:

    @given(values=ratings)
    @settings(max_examples=200)
    def test_average_rounds_half_up_to_one_decimal(self, values):
        mean = Fraction(sum(values), len(values))
        expected = math.floor(mean * 10 + Fraction(1, 2)) / 10
        assert average_rating(values) == expected

    @given(values=ratings)
    def test_average_stays_in_range(self, values):
        assert 1.0 <= average_rating(values) <= 5.0

    def test_no_ratings(self):
        assert average_rating([]) == 0.0

    @pytest.mark.parametrize(
        "values, expected",
        [
            ([4, 5], 4.5),
            ([1, 2, 2], 1.7),
            ([5, 5, 4, 4, 4, 4, 4, 4], 4.3),
            ([3, 3, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4], 3.9),
        ],
    )
    def test_known_averages(self, values, expected):
        assert average_rating(values) == expected


class TestEarningsProperties:

    @given(
        total=st.integers(min_value=0, max_value=10_000_000 * 100),
        count=st.integers(min_value=1, max_value=100),
    )
    def test_average_cents_is_nearest_whole_cent(self, total, count):
        average = average_cents(total, count)
        assert abs(Fraction(total, count) - average) <= Fraction(1, 2)

    def test_average_without_tips(self):
        assert average_cents(0, 0) == 0


class TestTipNotificationProperties:

    @given(amount=st.integers(min_value=1, max_value=10_000_000))
    def test_amount_in_rupees(self, amount):
        body = tip_notification_body(amount, None, None)
        assert body == f"You received a tip of ₹{amount // 100}.{amount % 100:02d}"

    @given(
        amount=st.integers(min_value=1, max_value=10_000_000),
        payer=st.text(min_size=1, max_size=40),
        message=st.text(min_size=1, max_size=80),
    )
    def test_payer_and_message_included(self, amount, payer, message):
        body = tip_notification_body(amount, payer, message)
        assert f" from {payer}" in body
        assert body.endswith(f': "{message}"')

    def test_example(self):
        assert tip_notification_body(25000, "Raj", "Thanks") == 'You received a tip of ₹250.00 from Raj: "Thanks"'


class TestQrSlugProperties:

    SLUG = re.compile(r"^[a-z0-9]+-[a-z0-9]+-[0-9a-f]{8}$")

    @given(restaurant=st.text(max_size=60), worker=st.text(max_size=60))
    def test_slug_is_url_safe(self, restaurant, worker):
        assert self.SLUG.match(generate_qr_slug(restaurant, worker))

    def test_empty_names_fall_back(self):
        assert generate_qr_slug("!!!", "").startswith("restaurant-worker-")

    def test_slugs_differ(self):
        assert generate_qr_slug("Cafe", "Ana") != generate_qr_slug("Cafe", "Ana")


class TestValidationProperties:

    @given(amount=st.integers(max_value=0))
    def test_non_positive_amount_rejected(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            parse_body(TipCreate, {"qr_slug": "aisha-qr", "amount_cents": amount}, TIP_ERROR_CODES)
        assert exc_info.value.code == "INVALID_AMOUNT"

    @given(rating=st.integers().filter(lambda r: r < 1 or r > 5))
    def test_out_of_range_rating_rejected(self, rating):
        with pytest.raises(ValidationError) as exc_info:
            parse_body(
                TipCreate,
                {"qr_slug": "aisha-qr", "amount_cents": 100, "rating": rating},
                TIP_ERROR_CODES,
            )
        assert exc_info.value.code == "INVALID_RATING"

    @given(amount=st.integers(min_value=1, max_value=10_000_000), rating=st.integers(min_value=1, max_value=5))
    def test_valid_tip_accepted(self, amount, rating):
        tip = parse_body(TipCreate, {"qrSlug": "aisha-qr", "amountCents": amount, "rating": rating}, TIP_ERROR_CODES)
        assert tip.amount_cents == amount
        assert tip.currency == "INR"

    @given(local=st.from_regex(r"[A-Za-z0-9._]{1,20}", fullmatch=True))
    def test_email_normalization_idempotent(self, local):
        email = f"  {local}@Example.COM "
        once = normalize_email(email)
        assert once == normalize_email(once)
        assert once == once.lower().strip()

    @given(term=st.text(alphabet="ab%_\\ ", max_size=50))
    def test_like_escaping_leaves_no_bare_wildcards(self, term):
        escaped = escape_like_pattern(term)
        assert re.search(r"(?<!\\)(\\\\)*[%_]", escaped) is None
