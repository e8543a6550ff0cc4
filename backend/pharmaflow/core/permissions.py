"""
Role-based access control for POS employees.

Every route declares one permission action; a static role table decides
whether the logged-in employee may perform it.
"""
from typing import Dict, FrozenSet

ROLES = ("admin", "manager", "pharmacist", "senior_cashier", "cashier", "delivery", "officeboy")

ALL_PERMISSIONS: FrozenSet[str] = frozenset({
    # Inventory
    "inventory.view", "inventory.add", "inventory.update", "inventory.delete",
    "inventory.adjust", "inventory.restock",
    # Sales
    "sale.create", "sale.view_history", "sale.view_details", "sale.refund",
    "sale.modify", "sale.cancel", "sale.discount", "sale.checkout",
    # Purchases
    "purchase.view", "purchase.create", "purchase.approve", "purchase.reject",
    # Suppliers
    "supplier.view", "supplier.add", "supplier.update", "supplier.delete",
    # Customers
    "customer.view", "customer.add", "customer.update", "customer.delete",
    # Shifts
    "shift.view", "shift.open", "shift.close", "shift.reports",
    # Reports
    "reports.view_financial", "reports.view_inventory", "reports.export",
    # Settings & users
    "settings.view", "settings.update", "users.view", "users.manage", "backup.manage",
})

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "admin": ALL_PERMISSIONS,
    "manager": ALL_PERMISSIONS - {"settings.update", "users.manage", "backup.manage"},
    "pharmacist": frozenset({
        "inventory.view", "inventory.add", "inventory.update", "inventory.adjust", "inventory.restock",
        "sale.create", "sale.view_history", "sale.view_details", "sale.discount", "sale.checkout",
        "purchase.view", "purchase.create",
        "supplier.view", "supplier.add",
        "customer.view", "customer.add", "customer.update",
        "reports.view_inventory",
    }),
    "senior_cashier": frozenset({
        "inventory.view",
        "sale.create", "sale.view_history", "sale.view_details", "sale.refund",
        "sale.cancel", "sale.discount", "sale.checkout",
        "customer.view", "customer.add", "customer.update",
        "shift.view", "shift.open", "shift.close", "shift.reports",
    }),
    "cashier": frozenset({
        "inventory.view",
        "sale.create", "sale.checkout",
        "customer.view", "customer.add",
        "shift.view",
    }),
    "delivery": frozenset({"sale.view_history", "sale.view_details"}),
    "officeboy": frozenset(),
}


def can_perform_action(role: str | None, action: str) -> bool:
    """Unknown roles (e.g. from older records) get no permissions."""
    if not role:
        return False
    return action in ROLE_PERMISSIONS.get(role, frozenset())
