from gymapp.models.booking import Booking
from gymapp.models.message import Message
from gymapp.models.payment import Payment
from gymapp.models.subscription import Subscription
from gymapp.models.trainer_availability import AvailabilitySlot, TrainerAvailability
from gymapp.models.user import User
from gymapp.models.workout_plan import WorkoutPlan, WorkoutPlanClient

__all__ = [
    "AvailabilitySlot",
    "Booking",
    "Message",
    "Payment",
    "Subscription",
    "TrainerAvailability",
    "User",
    "WorkoutPlan",
    "WorkoutPlanClient",
]
