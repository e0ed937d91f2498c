"""
Module 'checkout': flux de confirmation de commande (machine à états) et ses endpoints.
"""

from .flow import ConfirmationFlow, FlowState

__all__ = ["ConfirmationFlow", "FlowState"]
