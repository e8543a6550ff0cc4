from pharmaflow.models.supplier import Supplier
from pharmaflow.models.drug import Drug
from pharmaflow.models.stock_movement import StockMovement
from pharmaflow.models.customer import Customer
from pharmaflow.models.employee import Employee
from pharmaflow.models.sale import Sale, SaleItem
from pharmaflow.models.sale_return import SaleReturn, ReturnItem
from pharmaflow.models.purchase import Purchase, PurchaseItem
from pharmaflow.models.shift import Shift, CashTransaction
from pharmaflow.models.app_state import AppState, SchemaMigration, MigrationBackup

__all__ = [
    "Supplier", "Drug", "StockMovement", "Customer", "Employee",
    "Sale", "SaleItem", "SaleReturn", "ReturnItem", "Purchase", "PurchaseItem",
    "Shift", "CashTransaction", "AppState", "SchemaMigration", "MigrationBackup",
]
