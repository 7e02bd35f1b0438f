"""
State management for the bonding-curve exchange
"""

from .balances import BalanceTable
from .ledger import EscrowLedger
from .state_root import compute_ledger_root
from .withdrawers import WithdrawerTable

__all__ = [
    "BalanceTable",
    "EscrowLedger",
    "WithdrawerTable",
    "compute_ledger_root",
]
