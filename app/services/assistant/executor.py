"""
Assistant Action Executor
Runs a confirmed manager-assistant action against Supabase

Actions arrive with spoken names ("assign Aslam to City Mall") which are
resolved to ids inside the caller's branch before any write.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional
from postgrest import SyncPostgrestClient

from app.services.lookup import resolve_entity_id
from app.services.reports import ReportError, generate_report

logger = logging.getLogger(__name__)

LIST_LIMIT = 20
LEAD_LIST_LIMIT = 10


class ActionError(Exception):
    """Action rejected with an HTTP status (bad input, unknown name, unsupported)."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _present(data: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    """Subset of data with only the keys the caller actually sent."""
    return {key: data[key] for key in keys if data.get(key) is not None}


class ActionExecutor:
    """
    Executes assistant actions for one authenticated caller.

    Args:
        supabase: User-scoped client (row-level policies apply)
        profile: Caller profile with role and branch_id
    """

    def __init__(self, supabase: SyncPostgrestClient, profile: Dict[str, Any], today: Optional[date] = None):
        self.supabase = supabase
        self.role = profile.get("role")
        self.branch_id = profile.get("branch_id")
        self.profile = profile
        self.today = today

    async def execute(self, action_type: str, entity: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Dispatch one action.

        Raises:
            ActionError: unsupported entity/action, missing fields or unresolved names
        """
        data = data or {}

        if action_type == "create" and not self.branch_id:
            raise ActionError(400, "No branch assigned. Cannot create records without a branch.")

        handlers = {
            "place": self._place,
            "guard": self._guard,
            "inventory": self._inventory,
            "assignment": self._assignment,
            "lead": self._lead,
        }

        logger.info(f"🤖 Executing {action_type} on {entity}")

        if entity == "report":
            try:
                report = await generate_report(self.supabase, self.profile, data, today=self.today)
            except ReportError as e:
                raise ActionError(e.status_code, e.message)
            return {"success": True, "report": report.model_dump()}

        handler = handlers.get(entity)
        if handler is None:
            raise ActionError(400, f"Unsupported entity: {entity}")

        result = handler(action_type, data)
        if result is None:
            raise ActionError(400, f"Unsupported action: {action_type} on {entity}")
        return result

    # ------------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------------

    def _resolve(self, table: str, name: Optional[str]) -> Optional[str]:
        return resolve_entity_id(self.supabase, table, name, self.branch_id)

    def _list(self, table: str, columns: str, order: str, limit: int = LIST_LIMIT, desc: bool = False, **filters):
        query = self.supabase.table(table).select(columns)
        for column, value in filters.items():
            query = query.eq(column, value)
        query = query.order(order, desc=desc)
        if self.role == "branch_admin" and self.branch_id:
            query = query.eq("branch_id", self.branch_id)
        return query.limit(limit).execute().data or []

    def _target_id(self, table: str, label: str, data: Dict[str, Any]) -> str:
        """Row id from data.id, else by resolving data.name."""
        row_id = data.get("id") or self._resolve(table, data.get("name"))
        if not row_id:
            raise ActionError(404, f'Could not find {label} "{data.get("name")}"')
        return row_id

    # ------------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------------

    def _place(self, action_type: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if action_type == "create":
            self.supabase.table("places").insert({
                "name": data.get("name"),
                "address": data.get("address") or "",
                "city": data.get("city") or None,
                "contact_person": data.get("contact_person") or None,
                "contact_phone": data.get("contact_phone") or None,
                "branch_id": self.branch_id,
            }).execute()
            return {"success": True, "message": f'Place "{data.get("name")}" created'}

        if action_type == "update" and (data.get("name") or data.get("id")):
            place_id = self._target_id("places", "place", data)
            changes = _present(data, "address", "city", "contact_person", "contact_phone")
            changes["updated_at"] = _now_iso()
            self.supabase.table("places").update(changes).eq("id", place_id).execute()
            return {"success": True, "message": f'Place "{data.get("name") or place_id}" updated'}

        if action_type == "list":
            places = self._list("places", "id, name, address, city", "name")
            return {"success": True, "data": places}

        if action_type == "delete" and (data.get("id") or data.get("name")):
            place_id = self._target_id("places", "place", data)
            self.supabase.table("places").delete().eq("id", place_id).execute()
            return {"success": True, "message": "Place deleted"}

        return None

    def _guard(self, action_type: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if action_type == "create":
            self.supabase.table("guards").insert({
                "name": data.get("name"),
                "guard_code": data.get("guard_code"),
                "cnic": data.get("cnic"),
                "phone": data.get("phone") or None,
                "address": data.get("address") or None,
                "status": "active",
                "branch_id": self.branch_id,
            }).execute()
            return {"success": True, "message": f'Guard "{data.get("name")}" created'}

        if action_type == "update" and (data.get("name") or data.get("id")):
            guard_id = self._target_id("guards", "guard", data)
            changes = _present(data, "phone", "address", "status")
            changes["updated_at"] = _now_iso()
            self.supabase.table("guards").update(changes).eq("id", guard_id).execute()
            return {"success": True, "message": f'Guard "{data.get("name") or guard_id}" updated'}

        if action_type == "list":
            guards = self._list("guards", "id, name, guard_code, phone, status", "name")
            return {"success": True, "data": guards}

        if action_type == "delete" and (data.get("id") or data.get("name")):
            guard_id = self._target_id("guards", "guard", data)
            self.supabase.table("guards").delete().eq("id", guard_id).execute()
            return {"success": True, "message": "Guard deleted"}

        return None

    def _inventory(self, action_type: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if action_type == "create":
            self.supabase.table("inventory_items").insert({
                "name": data.get("name"),
                "category": data.get("category") or "Other",
                "tracking_type": data.get("tracking_type") or "quantity",
                "branch_id": self.branch_id,
                "total_quantity": data.get("quantity") or 0,
            }).execute()
            return {"success": True, "message": f'Inventory item "{data.get("name")}" created'}

        if action_type == "assign":
            item_name = data.get("item_name")
            target_name = data.get("target_name")
            target_type = data.get("target_type")

            if not item_name or not target_name or not target_type:
                raise ActionError(400, "Missing required fields: item_name, target_name, target_type")

            item_id = self._resolve("inventory_items", item_name)
            target_id = self._resolve("guards" if target_type == "guard" else "places", target_name)

            if not item_id:
                raise ActionError(404, f'Item "{item_name}" not found')
            if not target_id:
                raise ActionError(404, f'{target_type} "{target_name}" not found')

            quantity = data.get("quantity") or 1
            payload = {
                "branch_id": self.branch_id,
                "item_id": item_id,
                "assigned_to_type": target_type,
                "quantity": quantity,
                "assigned_at": _now_iso(),
            }
            if target_type == "guard":
                payload["guard_id"] = target_id
            else:
                payload["place_id"] = target_id

            self.supabase.table("inventory_assignments").insert(payload).execute()
            return {"success": True, "message": f"Assigned {quantity} {item_name} to {target_name}"}

        if action_type == "list":
            items = self._list("inventory_items", "id, name, category, total_quantity", "name")
            return {"success": True, "data": items}

        return None

    def _assignment(self, action_type: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if action_type == "create":
            guard_name = data.get("guard_name")
            place_name = data.get("place_name")

            if not guard_name or not place_name:
                raise ActionError(400, "Guard name and Place name are required")

            guard_id = self._resolve("guards", guard_name)
            place_id = self._resolve("places", place_name)

            if not guard_id:
                raise ActionError(404, f'Guard "{guard_name}" not found')
            if not place_id:
                raise ActionError(404, f'Place "{place_name}" not found')

            self.supabase.table("assignments").insert({
                "branch_id": self.branch_id,
                "guard_id": guard_id,
                "place_id": place_id,
                "start_date": data.get("start_date") or (self.today or date.today()).isoformat(),
                "shift_type": data.get("shift_type") or "day",
                "status": "active",
            }).execute()
            return {"success": True, "message": f"Assigned {guard_name} to {place_name}"}

        if action_type == "list":
            rows = self._list(
                "assignments",
                "id, start_date, shift_type, status, guard:guards(name), place:places(name)",
                "start_date",
                desc=True,
                status="active",
            )
            # flattened so the model can read it back aloud
            flat = [
                {
                    "id": row.get("id"),
                    "guard": (row.get("guard") or {}).get("name"),
                    "place": (row.get("place") or {}).get("name"),
                    "shift": row.get("shift_type"),
                    "since": row.get("start_date"),
                }
                for row in rows
            ]
            return {"success": True, "data": flat}

        return None

    def _lead(self, action_type: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if action_type == "list":
            leads = self._list(
                "service_requests",
                "id, request_number, customer_name, service_type, status, created_at",
                "created_at",
                limit=LEAD_LIST_LIMIT,
                desc=True,
            )
            return {"success": True, "data": leads}

        if action_type == "update" and data.get("id") and data.get("status"):
            self.supabase.table("service_requests")\
                .update({"status": data["status"], "updated_at": _now_iso()})\
                .eq("id", data["id"])\
                .execute()
            return {"success": True, "message": "Lead status updated"}

        return None
