"""
coatcalc - Coating mass calculator.

Computes primer/topcoat and curing-agent masses for a surface and keeps a
bounded, persisted history of past calculations.
"""

__version__ = "0.1.0"
