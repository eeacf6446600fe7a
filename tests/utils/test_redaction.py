"""Tests for secret redaction utility."""

from ordertrack.utils.redaction import mask_email, redact_for_logging, sanitize_error_message


class TestRedactForLogging:

    def test_redacts_token_in_nested_config(self):
        data = {"upstream": {"token": "tok_123", "shop": "demo"}, "server": {"port": 8000}}
        result = redact_for_logging(data)
        assert result["upstream"]["token"] == "***REDACTED***"
        assert result["upstream"]["shop"] == "demo"
        assert result["server"] == {"port": 8000}

    def test_does_not_mutate_input(self):
        data = {"token": "tok_123"}
        redact_for_logging(data)
        assert data == {"token": "tok_123"}

    def test_empty_secret_stays_empty(self):
        assert redact_for_logging({"token": ""}) == {"token": ""}

    def test_case_insensitive_matching(self):
        result = redact_for_logging({"Authorization": "Bearer x", "API_KEY": "k", "Name": "demo"})
        assert result["Authorization"] == "***REDACTED***"
        assert result["API_KEY"] == "***REDACTED***"
        assert result["Name"] == "demo"

    def test_handles_list_of_dicts(self):
        result = redact_for_logging({"items": [{"password": "p", "id": 1}, "plain"]})
        assert result["items"] == [{"password": "***REDACTED***", "id": 1}, "plain"]

    def test_custom_patterns(self):
        result = redact_for_logging({"shop": "demo"}, sensitive_patterns=frozenset({"shop"}))
        assert result["shop"] == "***REDACTED***"


class TestSanitizeErrorMessage:

    def test_strips_bearer_token(self):
        msg = sanitize_error_message("401 for header Authorization: Bearer tok_abc.def")
        assert "tok_abc" not in msg
        assert "Bearer ***REDACTED***" in msg

    def test_truncates(self):
        assert len(sanitize_error_message("x" * 1000, max_length=50)) == 50

    def test_none(self):
        assert sanitize_error_message(None) is None


class TestMaskEmail:

    def test_masks_local_part(self):
        assert mask_email("maria.silva@example.com") == "m***@example.com"

    def test_not_an_email(self):
        assert mask_email("maria") == "***"

    def test_empty(self):
        assert mask_email(None) == ""
