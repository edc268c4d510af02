"""
Centralized constants for bookings, subscriptions, payments and the scheduler.

Change status names, plan defaults or job IDs here instead of scattering literals
across services and routes.
"""

# Booking lifecycle
BOOKING_PENDING = "pending"
BOOKING_CONFIRMED = "confirmed"
BOOKING_CANCELLED = "cancelled"
BOOKING_STATUSES = (BOOKING_PENDING, BOOKING_CONFIRMED, BOOKING_CANCELLED)

# No transition leaves cancelled; confirmed is also a valid initial state.
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    BOOKING_PENDING: frozenset({BOOKING_CONFIRMED, BOOKING_CANCELLED}),
    BOOKING_CONFIRMED: frozenset({BOOKING_CANCELLED}),
    BOOKING_CANCELLED: frozenset(),
}

# Subscriptions
SUBSCRIPTION_ACTIVE = "active"
SUBSCRIPTION_PENDING = "pending"
SUBSCRIPTION_EXPIRED = "expired"
SUBSCRIPTION_CANCELED = "canceled"
SUBSCRIPTION_STATUSES = (SUBSCRIPTION_ACTIVE, SUBSCRIPTION_PENDING, SUBSCRIPTION_EXPIRED, SUBSCRIPTION_CANCELED)

PLAN_TYPES = ("basic", "premium", "pro")
# (session_discount percent, max_bookings_per_month) per plan; overridable per subscription
PLAN_DEFAULTS: dict[str, tuple[float, int]] = {
    "basic": (0.0, 10),
    "premium": (10.0, 20),
    "pro": (20.0, 40),
}

# Payments
PAYMENT_METHODS = ("cash", "credit_card", "bank_transfer", "stripe", "paypal")

# Password policy: at least 8 characters, letters and digits
PASSWORD_MIN_LENGTH = 8

# Scheduler job IDs (must match ids used in main.py add_job)
SUBSCRIPTION_EXPIRY_JOB_ID = "subscription_expiry"

# Realtime events
EVENT_SEND_MESSAGE = "sendMessage"
EVENT_RECEIVE_MESSAGE = "receiveMessage"
EVENT_ERROR = "error"
