"""String enumerations shared by models, schemas and services.

Columns store the plain string value; request schemas validate against these.
"""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"
    AGENT = "agent"
    LANDLORD = "landlord"
    TENANT = "tenant"
    BUYER = "buyer"
    SELLER = "seller"
    SOLICITOR = "solicitor"
    PROPERTY_MANAGER = "property_manager"
    CONTRACTOR = "contractor"
    VIEWER = "viewer"
    USER = "user"


SELF_SERVICE_ROLES = frozenset(
    {
        UserRole.TENANT.value,
        UserRole.LANDLORD.value,
        UserRole.BUYER.value,
        UserRole.SELLER.value,
        UserRole.AGENT.value,
        UserRole.USER.value,
    }
)

ADMIN_ROLES = frozenset({UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value})


class PropertyType(str, Enum):
    HOUSE = "house"
    FLAT = "flat"
    APARTMENT = "apartment"
    BUNGALOW = "bungalow"
    MAISONETTE = "maisonette"
    TERRACED = "terraced"
    SEMI_DETACHED = "semi_detached"
    DETACHED = "detached"
    STUDIO = "studio"
    PENTHOUSE = "penthouse"
    LAND = "land"
    COMMERCIAL = "commercial"
    OFFICE = "office"
    RETAIL = "retail"
    WAREHOUSE = "warehouse"
    INDUSTRIAL = "industrial"


class ListingType(str, Enum):
    SALE = "sale"
    RENT = "rent"
    BOTH = "both"


class PropertyStatus(str, Enum):
    AVAILABLE = "available"
    UNDER_OFFER = "under_offer"
    SOLD = "sold"
    LET = "let"
    WITHDRAWN = "withdrawn"
    MAINTENANCE = "maintenance"
    DRAFT = "draft"


class PropertySource(str, Enum):
    MANUAL = "manual"
    LAND_REGISTRY = "land_registry"


class EpcRating(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"


class MarketPosition(str, Enum):
    ABOVE_MARKET = "above_market"
    BELOW_MARKET = "below_market"
    MARKET_VALUE = "market_value"


class InvestmentPotential(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TenancyType(str, Enum):
    ASSURED_SHORTHOLD = "assured_shorthold"
    ASSURED = "assured"
    REGULATED = "regulated"
    COMPANY_LET = "company_let"
    STUDENT = "student"
    HOLIDAY_LET = "holiday_let"


class TenancyStatus(str, Enum):
    DRAFT = "draft"
    PENDING_SIGNATURE = "pending_signature"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"
    RENEWED = "renewed"
    BREACHED = "breached"
    ENDED = "ended"


class RentFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class DepositScheme(str, Enum):
    DPS = "dps"
    TDS = "tds"
    MYDEPOSITS = "mydeposits"
    CUSTODIAL = "custodial"
    INSURANCE_BASED = "insurance_based"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class TransactionType(str, Enum):
    RENT_PAYMENT = "rent_payment"
    DEPOSIT = "deposit"
    MAINTENANCE_FEE = "maintenance_fee"
    COMMISSION = "commission"
    REFUND = "refund"
    LATE_FEE = "late_fee"
    UTILITY_PAYMENT = "utility_payment"
    INSURANCE_PAYMENT = "insurance_payment"
    TAX_PAYMENT = "tax_payment"
    OTHER = "other"


INCOME_TRANSACTION_TYPES = frozenset(
    {
        TransactionType.RENT_PAYMENT.value,
        TransactionType.DEPOSIT.value,
        TransactionType.LATE_FEE.value,
        TransactionType.COMMISSION.value,
    }
)

EXPENSE_TRANSACTION_TYPES = frozenset(
    {
        TransactionType.MAINTENANCE_FEE.value,
        TransactionType.UTILITY_PAYMENT.value,
        TransactionType.INSURANCE_PAYMENT.value,
        TransactionType.TAX_PAYMENT.value,
        TransactionType.REFUND.value,
    }
)


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class InvoiceType(str, Enum):
    RENT = "rent"
    DEPOSIT = "deposit"
    MAINTENANCE = "maintenance"
    COMMISSION = "commission"
    UTILITIES = "utilities"
    INSURANCE = "insurance"
    MANAGEMENT_FEE = "management_fee"
    LATE_FEE = "late_fee"
    OTHER = "other"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    PAID = "paid"
    PARTIALLY_PAID = "partially_paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class ReportType(str, Enum):
    INCOME_STATEMENT = "income_statement"
    CASH_FLOW = "cash_flow"
    PROFIT_LOSS = "profit_loss"
    RENT_ROLL = "rent_roll"
    EXPENSE_REPORT = "expense_report"
    TAX_REPORT = "tax_report"
    PORTFOLIO_SUMMARY = "portfolio_summary"
    CUSTOM = "custom"


class ReportStatus(str, Enum):
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"
    SCHEDULED = "scheduled"


class ReportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"
    CSV = "csv"
    JSON = "json"


class ReportPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class FileType(str, Enum):
    IMAGE = "image"
    DOCUMENT = "document"
    VIDEO = "video"
    OTHER = "other"
