from typing import Optional


def normalize_email(raw_email: Optional[str]) -> str:
    """Canonical join key for an email: trimmed and lowercased ("" when missing)."""
    if not raw_email:
        return ""
    return raw_email.strip().lower()
