"""Rental property ledger: baselines, reconciliation and period analytics."""

__version__ = "0.1.0"

__all__ = ["__version__"]
