"""
Property ledger: canvassed properties, status state machine and visit log.
"""
from src.canvasser.ledger.property_ledger import PropertyLedger, StatusTransitions

__all__ = [
    "PropertyLedger",
    "StatusTransitions",
]
