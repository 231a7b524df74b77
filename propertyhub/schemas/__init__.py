"""Pydantic schemas package.

Folder intent:
  common.py         — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  user.py           — Auth requests, token pairs, user profiles
  property.py       — Listings, valuation, market analysis, saved searches
  tenancy.py        — Tenancy agreements and rent payments
  financial.py      — Transactions, invoices, reports, statements
  file_upload.py    — Uploaded file metadata and stats
  land_registry.py  — CSV import records, progress and results
"""
