"""Secret redaction utility for safe logging and diagnostic output.

Keeps the upstream bearer token out of logs and ``config show`` output,
and masks customer emails in log lines. Key matching is a
case-insensitive substring check.
"""

import re

# Substring patterns matched case-insensitively against dict keys
_DEFAULT_SENSITIVE_PATTERNS = frozenset({
    "secret", "token", "authorization", "api_key", "password",
})

_REDACTED = "***REDACTED***"

_BEARER_PATTERN = re.compile(r"(?i)bearer\s+\S+")


def _is_sensitive_key(key: str, sensitive_patterns: frozenset[str]) -> bool:
    key_lower = key.lower()
    return any(pattern in key_lower for pattern in sensitive_patterns)


def redact_for_logging(
    obj: dict,
    sensitive_patterns: frozenset[str] = _DEFAULT_SENSITIVE_PATTERNS,
) -> dict:
    """Redact sensitive values from a dict for safe logging.

    Args:
        obj: Dict to redact (not mutated; a copy is returned).
        sensitive_patterns: Substring patterns whose matching keys' values
            are replaced. Empty values stay empty so a missing token is
            still visible as missing.

    Returns:
        New dict with sensitive values replaced by '***REDACTED***'.
    """
    result = {}
    for key, value in obj.items():
        if _is_sensitive_key(str(key), sensitive_patterns):
            result[key] = _REDACTED if value else value
        elif isinstance(value, dict):
            result[key] = redact_for_logging(value, sensitive_patterns)
        elif isinstance(value, list):
            result[key] = [
                redact_for_logging(item, sensitive_patterns) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value
    return result


def sanitize_error_message(msg: str | None, max_length: int = 500) -> str | None:
    """Strip bearer tokens from a free-text error message and truncate it."""
    if msg is None:
        return None
    sanitized = _BEARER_PATTERN.sub("Bearer " + _REDACTED, msg)
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length - 3] + "..."
    return sanitized


def mask_email(email: str | None) -> str:
    """Mask the local part of an email for log lines.

    Example:
        >>> mask_email("maria.silva@example.com")
        'm***@example.com'
    """
    if not email:
        return ""
    local, sep, domain = email.strip().partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"
