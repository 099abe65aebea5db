# ============================================================================
# REVISION SUFFIX POLICY
# ============================================================================
# STATUS: Service - Pure function
# PURPOSE: Compute the next revision suffix for a template PATCH
# CREATED: 19 OCT 2026
# ============================================================================
"""
Revision Suffix Policy

ARM creates a new revision only when the template changes; setting a fresh
`revisionSuffix` on every PATCH guarantees one. Suffixes follow the
platform's `name-N` convention so the chain reads naturally:

    myapp--prod-3  ->  prod-4
    myapp--blue    ->  blue-1
    (no revision)  ->  20261019-142501
"""

from datetime import datetime, timezone
from typing import Optional

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


def timestamp_suffix(now: Optional[datetime] = None) -> str:
    """Sortable, second-granularity UTC suffix."""
    now = now or datetime.now(timezone.utc)
    return now.strftime(TIMESTAMP_FORMAT)


def next_suffix(latest_revision_name: Optional[str], app_name: str, now: Optional[datetime] = None) -> str:
    """
    Next revision suffix after `latest_revision_name`.

    Args:
        latest_revision_name: Current revision (e.g. "myapp--prod-3"), may be None
        app_name: Container App name, stripped as a "{app_name}--" prefix
        now: Clock override for the timestamp fallback

    Returns:
        "{prefix}-{N+1}" when the current suffix ends in "-N",
        "{suffix}-1" otherwise, a timestamp when there is no revision yet.
    """
    if not latest_revision_name:
        return timestamp_suffix(now)

    prefix = f"{app_name}--"
    current = latest_revision_name
    if current.lower().startswith(prefix.lower()):
        current = current[len(prefix):]

    base, dash, counter = current.rpartition("-")
    if dash and base and counter.isascii() and counter.isdigit():
        return f"{base}-{int(counter) + 1}"

    return f"{current}-1"


__all__ = ["next_suffix", "timestamp_suffix", "TIMESTAMP_FORMAT"]
