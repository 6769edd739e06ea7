"""
Utility functions for the application.
"""
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime, timezone
import uuid


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_id() -> str:
    """Generate an opaque unique identifier."""
    return str(uuid.uuid4())


def parse_id_list(raw: Optional[str]) -> List[str]:
    """Parse a comma-separated id list (e.g. ``?exclude=a,b``), dropping blanks."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def merge_ids(existing: Iterable[str], *extra: str) -> List[str]:
    """Append ids to a list, keeping first-seen order and skipping duplicates."""
    merged = []
    for item in list(existing) + list(extra):
        if item and item not in merged:
            merged.append(item)
    return merged


def format_error(message: str, code: str = "error", details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message, "code": code}
    if details:
        response["details"] = details
    return response
