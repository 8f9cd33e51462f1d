"""GET /v1/levels - Saving level catalog"""

from fastapi import APIRouter

from savelo_gateway.api.v1.schemas import LevelSchema, LevelsResponse
from savelo_gateway.domain.levels import list_levels
from savelo_gateway.domain.penalties import COMPLETION_REWARD_RATE
from savelo_gateway.domain.state_machine import GRACE_PERIOD_DAYS

router = APIRouter()


@router.get("/levels", response_model=LevelsResponse)
def get_levels():
    """List challenge tiers with their bounds and pre-filled defaults"""
    return LevelsResponse(
        levels=[LevelSchema.from_domain(level) for level in list_levels()],
        grace_period_days=GRACE_PERIOD_DAYS,
        completion_reward_percent=int(COMPLETION_REWARD_RATE * 100),
    )
