"""
AI suggestions: summarise a user's profile and ask the coach agent for workout, nutrition and
progress suggestions.
"""
import json
import logging

from sqlalchemy.orm import Session

from gymapp.agents.coach_agent import agent as coach_agent
from gymapp.services.auth_service import get_user

logger = logging.getLogger(__name__)


def profile_for_prompt(user) -> dict:
    return {
        "role": user.role,
        "height_cm": user.height_cm,
        "weight_kg": user.weight_kg,
        "goal": user.goal,
        "workout_days_per_week": user.workout_days_per_week,
        "specialties": list(user.specialties or []),
    }


async def generate_suggestions(db: Session, user_id: int) -> dict[str, str]:
    """Run the coach agent for user_id. Raises NotFound for an unknown user; agent errors propagate."""
    user = get_user(db, user_id)
    prompt = "User data:\n" + json.dumps(profile_for_prompt(user), indent=2)
    result = await coach_agent.run(prompt)
    logger.info("Generated suggestions for user %s", user_id)
    return result.output.model_dump()
