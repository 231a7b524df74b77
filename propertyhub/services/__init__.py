"""Services package — all business logic lives here, never in routers.

Files:
  auth.py                  — Registration, login, refresh rotation, password + email flows
  user.py                  — Admin user management, profile updates
  property.py              — Listings, search, comparison, market analysis, favourites, images
  valuation.py             — Pure valuation / market scoring helpers
  tenancy.py               — Tenancy agreements, rent schedules, rent payments
  financial.py             — Transactions, invoices, reports, statements
  file_upload.py           — Local-disk uploads with pdfplumber PDF metadata
  land_registry_import.py  — Price Paid CSV validation and background import

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
