"""ID Generation Utilities"""
import secrets
import uuid
from datetime import datetime, timezone
from typing import Optional


def generate_id(prefix: Optional[str] = None) -> str:
    """
    Generate a unique ID with optional prefix

    Args:
        prefix: Optional prefix for the ID (e.g., 'USR', 'REQ', 'HIS')

    Returns:
        Unique ID string

    Examples:
        >>> generate_id('NTF')
        'NTF-a1b2c3d4e5f6'
        >>> generate_id()
        'a1b2c3d4e5f6'
    """
    unique_part = uuid.uuid4().hex[:12]

    if prefix:
        return f"{prefix}-{unique_part}"
    return unique_part


def generate_user_id() -> str:
    """Generate user ID"""
    return generate_id("USR")


def generate_request_id() -> str:
    """Generate request ID"""
    return generate_id("REQ")


def generate_ticket_number() -> str:
    """
    Generate the human-readable ticket number shown to beneficiaries

    Six digits taken from the millisecond clock, prefixed with REQ-.
    """
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"REQ-{str(millis)[-6:]}"


def generate_document_id() -> str:
    """Generate request document ID"""
    return generate_id("DOC")


def generate_history_id() -> str:
    """Generate history entry ID"""
    return generate_id("HIS")


def generate_notification_id() -> str:
    """Generate notification ID"""
    return generate_id("NTF")


def generate_outbox_id() -> str:
    """Generate notification outbox ID"""
    return generate_id("OBX")


def generate_subscription_id() -> str:
    """Generate push subscription ID"""
    return generate_id("SUB")


def generate_activity_log_id() -> str:
    """Generate activity log ID"""
    return generate_id("ACT")


def generate_access_code(prefix: str = "STF") -> str:
    """Generate a staff access code such as HOP482"""
    return f"{prefix.upper()[:3]}{secrets.randbelow(1000):03d}"


def generate_correlation_id() -> str:
    """
    Generate a correlation ID for request tracing

    Returns:
        Correlation ID string with timestamp prefix
    """
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    unique_part = uuid.uuid4().hex[:8]
    return f"COR-{timestamp}-{unique_part}"
