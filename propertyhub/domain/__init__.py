"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  user.py             — Platform users (every role)
  token.py            — Opaque refresh tokens
  property.py         — Listings, favourites, saved searches
  market_analysis.py  — Stored comparable-sales analyses
  tenancy.py          — Tenancy agreements and rent payments
  financial.py        — Transactions, invoices, financial reports
  file_upload.py      — Uploaded file metadata
  activity.py         — Immutable activity log (never updated or deleted)
  mixins.py           — Shared UUID / timestamp mixins
  enums.py            — String enumerations
"""

from propertyhub.domain.activity import ActivityLog
from propertyhub.domain.file_upload import FileUpload
from propertyhub.domain.financial import FinancialReport, Invoice, Transaction
from propertyhub.domain.market_analysis import MarketAnalysis
from propertyhub.domain.property import Property, PropertyFavorite, SavedSearch
from propertyhub.domain.tenancy import RentPayment, TenancyAgreement
from propertyhub.domain.token import RefreshToken
from propertyhub.domain.user import User

__all__ = [
    "ActivityLog",
    "FileUpload",
    "FinancialReport",
    "Invoice",
    "MarketAnalysis",
    "Property",
    "PropertyFavorite",
    "RefreshToken",
    "RentPayment",
    "SavedSearch",
    "TenancyAgreement",
    "Transaction",
    "User",
]
