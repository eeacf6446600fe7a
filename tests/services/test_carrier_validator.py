"""Tests for carrier detection and normalization."""

import pytest

from ordertrack.services.carrier_validator import (
    carrier_mismatch,
    clean_tracking_number,
    detect_carrier_by_number,
    normalize_carrier,
)


class TestDetectCarrierByNumber:
    @pytest.mark.parametrize(
        "number,expected",
        [
            ("1Z999AA10123456784", "UPS"),
            ("1z999aa10123456784", "UPS"),
            ("420123456789012345678", "USPS"),
            ("94001118992231234567", "USPS"),  # 20 digits: USPS wins the FedEx tie
            ("9400111899223123456789", "USPS"),
            ("123456789012", "FedEx"),
            ("123456789012345", "FedEx"),
            ("AA123456789BR", "Correios"),
            ("qb 123 456 789 br", "Correios"),
        ],
    )
    def test_known_patterns(self, number, expected):
        assert detect_carrier_by_number(number) == expected

    @pytest.mark.parametrize(
        "number",
        [None, "", "garbage", "1Z123", "12345", "1234567890123", "AA123456789US", "12345678901234567890123"],
    )
    def test_no_match_is_none(self, number):
        assert detect_carrier_by_number(number) is None

    def test_clean_tracking_number(self):
        assert clean_tracking_number(" 1z-999 aa1 ") == "1Z999AA1"
        assert clean_tracking_number(None) == ""


class TestNormalizeCarrier:
    @pytest.mark.parametrize(
        "claimed,expected",
        [
            ("ups", "UPS"),
            ("UPS Ground", "UPS"),
            ("usps", "USPS"),
            ("USPS Priority Mail", "USPS"),
            ("FedEx Express", "FedEx"),
            ("Correios - SEDEX", "Correios"),
            ("dhl express", "DHL"),
        ],
    )
    def test_known_names(self, claimed, expected):
        assert normalize_carrier(claimed) == expected

    def test_unknown_passes_through(self):
        assert normalize_carrier("  Jadlog ") == "Jadlog"

    def test_blank_is_none(self):
        assert normalize_carrier(None) is None
        assert normalize_carrier("   ") is None


class TestCarrierMismatch:
    def test_detected_and_claimed_differ(self):
        assert carrier_mismatch("UPS", "fedex") is True

    def test_same_carrier(self):
        assert carrier_mismatch("UPS", "ups ground") is False

    def test_missing_side_never_mismatches(self):
        assert carrier_mismatch(None, "ups") is False
        assert carrier_mismatch("UPS", None) is False
        assert carrier_mismatch(None, None) is False

    def test_unrecognized_claim_differs(self):
        assert carrier_mismatch("Correios", "Jadlog") is True
