"""
Warung Pricing Package

Markup-based selling price suggestions for a small shop POS.
Resolves cost price → markup rule → retail/wholesale prices, rounded to the nearest thousand.
"""

__version__ = "1.1.0"
