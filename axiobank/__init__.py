"""
AxioBank back office.

Service layer for the retail-banking back office: accounts, customers,
cards, credit assessment, branch operations, admin dashboards, audit
trails and master wallet reconciliation.
"""

__version__ = "0.1.0"
