"""
Single source of truth for database tables that exist after migrations (001, 002).

Use these names when writing raw SQL (e.g. TRUNCATE).
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = (
    "users",
    "trainer_availability",
    "availability_slots",
    "bookings",
    "subscriptions",
    "payments",
    "messages",
    "workout_plans",
    "workout_plan_clients",
)

# Tables cleared by scripts/reset_db.py. Children first so FKs never block a DELETE.
RESET_TABLE_NAMES = (
    "workout_plan_clients",
    "workout_plans",
    "messages",
    "bookings",
    "availability_slots",
    "trainer_availability",
    "payments",
    "subscriptions",
    "users",
)
