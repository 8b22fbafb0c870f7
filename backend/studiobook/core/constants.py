"""Application-wide constants for the studio booking platform."""

BRAND_NAME = "Studiobook"

# Booking constraints
MIN_BOOKING_HOURS = 1
MIN_SEATS = 1

# Query limits
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
RECENT_LEAD_BOOKINGS = 5

# Payment provider naming used in the ledger and payment rows
PAYMENT_PROVIDER_MAMOPAY = "MAMO_PAY"
