"""
                Restaurant Ordering API

GraphQL backend for restaurant ordering: menus, tables, orders, invoices
and staff, with owner signup, email verification and staff onboarding
backed by an external identity provider.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
