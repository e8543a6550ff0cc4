"""
Audit logging for register and back-office operations.

Every sale, return, purchase decision, shift change and stock correction is
written as one JSON line on the "audit" logger, so the trail can be shipped
somewhere else without touching the database.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional, Dict

audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for security-critical events."""

    @staticmethod
    def log_authentication(
        action: str,  # "login", "logout", "failed_login"
        username: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Log authentication events. Passwords and tokens are never included.

        Usage:
            AuditLog.log_authentication("login", "cashier1", "192.168.1.1", True)
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"auth.{action}",
            "username": username,
            "ip_address": ip_address,
            "success": success,
        }
        if reason and not success:
            log_entry["reason"] = reason

        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_action(
        action: str,  # "create", "approve", "reject", "complete", "return", "adjust", ...
        resource_type: str,  # "sale", "purchase", "drug", "shift", "customer", ...
        resource_id: Any,
        employee_id: Optional[int],
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log a business-critical change.

        Usage:
            AuditLog.log_action("complete", "sale", "100001", 3, changes={"total": 250.0})
            AuditLog.log_action("approve", "purchase", 12, 1)
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"{resource_type}.{action}",
            "employee_id": employee_id,
            "resource_id": str(resource_id),
        }
        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_access_denied(
        action: str,
        employee_id: Optional[int],
        role: Optional[str],
        path: str = "",
    ):
        """Log a permission denial (employee tried a page or action outside their role)."""
        log_entry = {
            "timestamp": _now(),
            "event_severity": "WARNING",
            "event_type": "access_denied",
            "action": action,
            "employee_id": employee_id,
            "role": role,
            "path": path,
        }
        audit_logger.warning(json.dumps(log_entry))
