"""
ForemanBot.economy — spendable-balance accounting.

Public API
----------
    from ForemanBot.economy import Cost, ResourceLedger, ResourceListener
"""

from ForemanBot.economy.resource_ledger import Cost, ResourceLedger, ResourceListener

__all__ = [
    "Cost",
    "ResourceLedger",
    "ResourceListener",
]
