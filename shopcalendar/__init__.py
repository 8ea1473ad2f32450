"""
shopcalendar - appointment scheduling and payment reconciliation for small shops.
"""

__version__ = "0.1.0"
