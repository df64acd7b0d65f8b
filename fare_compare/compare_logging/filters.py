"""Log filters for PII masking and correlation ID injection."""

import logging
import re


class PIIFilter(logging.Filter):
    """Masks PII (emails, phone numbers) in log messages.

    Driver candidates carry phone numbers, so anything that formats a
    candidate into a log line goes through this filter.
    """

    EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")
    PHONE_PATTERN = re.compile(r"\+?\d{2,3}[-.\s]?\d{3}[-.\s]?\d{3,4}[-.\s]?\d{0,4}")

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            msg = record.msg
            if "@" in msg:
                msg = self.EMAIL_PATTERN.sub("[EMAIL]", msg)
            if any(c.isdigit() for c in msg):
                msg = self._mask_phones(msg)
            record.msg = msg
        return True

    def _mask_phones(self, msg: str) -> str:
        def replace(match: re.Match[str]) -> str:
            digits = sum(c.isdigit() for c in match.group(0))
            # Coordinates and prices are shorter than any phone number.
            return "[PHONE]" if digits >= 10 else match.group(0)

        return self.PHONE_PATTERN.sub(replace, msg)


class DefaultCorrelationFilter(logging.Filter):
    """Adds default correlation_id if not present."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True
