"""Coach agent: workout, nutrition and progress suggestions. Instructions loaded from coach_agent_instructions.md."""
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from gymapp.config import settings

_INSTRUCTIONS_PATH = Path(__file__).resolve().parent / "coach_agent_instructions.md"
SYSTEM_PROMPT = _INSTRUCTIONS_PATH.read_text().strip()


class Suggestions(BaseModel):
    workout: str = Field(..., description="Personalized workout plan")
    nutrition: str = Field(..., description="Nutrition plan")
    progress: str = Field(..., description="Brief progress tracking strategy")


agent = Agent(
    model=settings.ai_model,
    output_type=Suggestions,
    instructions=SYSTEM_PROMPT,
    retries=1,
    model_settings=ModelSettings(max_tokens=4096, temperature=0.7),
    # Model is resolved on first run so the app imports without an API key
    defer_model_check=True,
)
