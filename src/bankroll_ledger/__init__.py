"""Bankroll ledger: wager/withdrawal log with retroactively consistent analytics."""

__version__ = "0.1.0"
