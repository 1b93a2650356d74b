"""
Rinkan Monitor

Polls the Rinkan marketplace search API for newly listed products,
filters them against user-defined criteria and delivers matches as
Discord webhook alerts.
"""

__version__ = "0.1.0"
__author__ = "Rinkan Monitor Team"
