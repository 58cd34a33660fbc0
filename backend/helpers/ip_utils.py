"""
Email hashing for privacy-safe logs.

Contact submissions are logged by a hash of the sender's address so logs
can correlate repeat senders without storing who they are.
"""

import hashlib


def hash_email_for_audit(email: str, salt: str = "contact_audit") -> str:
    """
    Hash an email address for logging.

    Preserves the domain for pattern analysis while hashing the local part.
    Format: first 8 chars of hash + @domain.tld

    Args:
        email: Email address to hash
        salt: Salt for hashing (use consistent salt for matching)

    Returns:
        Hashed email in format "a3f2c1d4...@example.com"
    """
    if not email or "@" not in email:
        return "invalid@unknown"

    local_part, domain = email.rsplit("@", 1)

    hash_input = f"{salt}:{local_part}".encode("utf-8")
    hash_value = hashlib.sha256(hash_input).hexdigest()

    return f"{hash_value[:8]}...@{domain}"
