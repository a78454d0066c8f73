"""Mutual fund portfolio health analyzer"""

__version__ = "1.0.0"
