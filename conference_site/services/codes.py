"""Participant code generation."""
import uuid


def generate_code() -> str:
    """Return a random 128-bit identifier as 32 lowercase hex characters.

    Uniqueness is ultimately enforced by the unique index on
    ``participants.code``.
    """
    return uuid.uuid4().hex
