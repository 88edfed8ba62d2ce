"""Phone number formatting for SMS invite recipients."""

import phonenumbers


def sms_recipient(raw: str, default_region: str | None = None) -> str:
    """Return the E.164 form of raw for an sms: URI.

    default_region applies only to numbers without a leading + (e.g. "202 555 1234"
    with "US"). Numbers that do not parse as valid are returned stripped so the
    messaging app can still try them.
    """
    stripped = (raw or "").strip()
    if not stripped:
        return ""
    try:
        parsed = phonenumbers.parse(stripped, default_region)
    except phonenumbers.NumberParseException:
        return stripped
    if not phonenumbers.is_valid_number(parsed):
        return stripped
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
