"""Repositories package — every SQLAlchemy query lives here.

Files:
  base.py         — Generic soft-delete / pagination repository
  user.py         — Users and refresh tokens
  property.py     — Properties, favourites, saved searches, market analyses
  tenancy.py      — Tenancy agreements and rent payments
  financial.py    — Transactions, invoices, reports
  file_upload.py  — Uploaded files
  activity.py     — Append-only activity log
"""
