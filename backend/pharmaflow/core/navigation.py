"""
Navigation shell: which pages an employee sees.

Pages are declared once in PAGE_REGISTRY, in menu order. A page with no
permission is open to every logged-in employee.
"""
from dataclasses import dataclass
from typing import List, Optional

from pharmaflow.core.permissions import can_perform_action


@dataclass(frozen=True)
class Page:
    key: str
    label: str
    section: str
    permission: Optional[str] = None


PAGE_REGISTRY: List[Page] = [
    Page("dashboard", "Dashboard", "main"),
    Page("pos", "Point of Sale", "sales", "sale.create"),
    Page("sales-history", "Sales History", "sales", "sale.view_history"),
    Page("return-history", "Returns", "sales", "sale.refund"),
    Page("cash-register", "Cash Register", "sales", "shift.view"),
    Page("shift-history", "Shift History", "sales", "shift.reports"),
    Page("inventory", "Inventory", "inventory", "inventory.view"),
    Page("stock-adjustment", "Stock Adjustment", "inventory", "inventory.adjust"),
    Page("purchases", "Purchases", "purchases", "purchase.view"),
    Page("pending-approval", "Pending Approval", "purchases", "purchase.approve"),
    Page("suppliers", "Suppliers", "purchases", "supplier.view"),
    Page("customers", "Customers", "customers", "customer.view"),
    Page("loyalty-lookup", "Loyalty Lookup", "customers", "customer.view"),
    Page("employees", "Employees", "hr", "users.view"),
    Page("financial-reports", "Financial Reports", "reports", "reports.view_financial"),
    Page("inventory-reports", "Inventory Reports", "reports", "reports.view_inventory"),
    Page("assistant", "Drug Assistant", "tools"),
    Page("settings", "Settings", "system", "settings.view"),
]


def pages_for_role(role: str) -> List[Page]:
    return [
        page for page in PAGE_REGISTRY
        if page.permission is None or can_perform_action(role, page.permission)
    ]
