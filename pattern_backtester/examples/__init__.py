"""Runnable demonstrations of the pattern backtester."""
