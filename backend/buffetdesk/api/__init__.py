# API Package
from buffetdesk.api import auth, cashflow, crm, expenses, inventory, payments, stats

__all__ = [
    'auth',
    'cashflow',
    'crm',
    'expenses',
    'inventory',
    'payments',
    'stats',
]
