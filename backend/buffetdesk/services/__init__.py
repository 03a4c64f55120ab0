# Services Package
from buffetdesk.services.user_service import UserService
from buffetdesk.services.crm_service import ClientService, EventService
from buffetdesk.services.payment_service import PaymentService
from buffetdesk.services.expense_service import ExpenseService
from buffetdesk.services.inventory_service import InventoryService
from buffetdesk.services.movement_service import InventoryMovementService
from buffetdesk.services.cashflow_service import CashFlowService
from buffetdesk.services.stats_service import StatsService

__all__ = [
    'UserService',
    'ClientService',
    'EventService',
    'PaymentService',
    'ExpenseService',
    'InventoryService',
    'InventoryMovementService',
    'CashFlowService',
    'StatsService',
]
