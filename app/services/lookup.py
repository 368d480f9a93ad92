"""
Name Lookup
Resolves spoken names ("Aslam", "main gate") to row ids within a branch,
and fetches single rows by id
"""
import logging
from typing import Any, Dict, Optional
from postgrest import SyncPostgrestClient

logger = logging.getLogger(__name__)

LOOKUP_TABLES = ("places", "guards", "inventory_items")


def resolve_entity_id(
    supabase: SyncPostgrestClient,
    table: str,
    name: Optional[str],
    branch_id: Optional[str]
) -> Optional[str]:
    """
    Find the id of a named row in the caller's branch.

    Tries a case-insensitive exact match first, then a substring match.

    Returns:
        The row id, or None when nothing matches
    """
    if table not in LOOKUP_TABLES:
        raise ValueError(f"Lookup not supported for table: {table}")

    name = (name or "").strip()
    if not name:
        return None

    for pattern in (name, f"%{name}%"):
        query = supabase.table(table).select("id")
        if branch_id:
            query = query.eq("branch_id", branch_id)
        result = query.ilike("name", pattern).limit(1).execute()

        if result.data:
            return result.data[0]["id"]

    logger.debug(f"No {table} row matches '{name}'")
    return None


def fetch_row(
    supabase: SyncPostgrestClient,
    table: str,
    row_id: Optional[str],
    columns: str = "*"
) -> Optional[Dict[str, Any]]:
    """Row with the given id, or None."""
    if not row_id:
        return None

    result = supabase.table(table).select(columns).eq("id", row_id).limit(1).execute()
    return result.data[0] if result.data else None
