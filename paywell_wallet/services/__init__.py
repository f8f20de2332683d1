"""
Service layer - Wallet and receipt operations.
"""

from .wallet_service import WalletService

__all__ = ["WalletService"]
