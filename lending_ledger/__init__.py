"""Collateralized lending ledger: loan risk and lifecycle engine."""

__version__ = "0.1.0"
