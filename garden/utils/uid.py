"""Document id generation."""

import uuid


def generate_id() -> str:
    """Generate a store document id (32 hex characters, UUIDv4)."""
    return uuid.uuid4().hex
