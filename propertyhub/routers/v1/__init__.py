"""v1 router package — all /api/v1/* endpoints live here.

Files:
  auth.py           — Register, login, refresh, logout, password + email flows
  users.py          — Profile and admin user management
  properties.py     — Listings, search, valuation, market analysis, favourites, images
  tenancies.py      — Tenancy agreements and their rent payments
  rent_payments.py  — Individual rent payments
  financial.py      — Transactions, invoices, reports, statements
  files.py          — File uploads and downloads
  land_registry.py  — Admin Price Paid CSV import (/admin/land-registry)

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to propertyhub/services/.
"""
