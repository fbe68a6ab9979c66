"""Service modules"""
from .collateral import CollateralOptions, CollateralService, RiskView, VaultSelection

__all__ = ["CollateralOptions", "CollateralService", "RiskView", "VaultSelection"]
