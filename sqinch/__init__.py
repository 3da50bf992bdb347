"""
Sqinch: catalog space efficiency analytics.

Scores catalog products by revenue per square inch of page space and
relates those scores to customer segments, co-purchases and individual
customers.
"""

__version__ = "1.0.0"
