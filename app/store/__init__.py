"""Persistence for investor records."""

from .investors import InvestorStore, DedupGate, ExistingMatch

__all__ = ["InvestorStore", "DedupGate", "ExistingMatch"]
