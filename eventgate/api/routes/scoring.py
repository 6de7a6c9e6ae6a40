"""Scoring Routes — rounds, score submissions, leaderboard and tally."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from eventgate.api.deps import (
    Caller, MENTOR_ROLES, STAFF_ROLES, get_scoring_service, require_roles,
)
from eventgate.schemas.scoring import RoundCreate, ScoreByToken, ScoreSubmit
from eventgate.services.scoring import ScoringService

router = APIRouter(prefix="/api/v1", tags=["scoring"])


def _round_dict(scoring_round) -> dict:
    return {
        "id": str(scoring_round.id),
        "name": scoring_round.name,
        "round_number": scoring_round.round_number,
    }


@router.post("/events/{event_id}/rounds", status_code=status.HTTP_201_CREATED)
async def create_round(
    event_id: UUID,
    body: RoundCreate,
    caller: Caller = Depends(require_roles(*STAFF_ROLES)),
    scoring: ScoringService = Depends(get_scoring_service),
):
    scoring_round = await scoring.create_round(event_id, body.name, body.round_number)
    return _round_dict(scoring_round)


@router.get("/events/{event_id}/rounds")
async def list_rounds(
    event_id: UUID,
    caller: Caller = Depends(require_roles(*MENTOR_ROLES)),
    scoring: ScoringService = Depends(get_scoring_service),
):
    rounds = await scoring.list_rounds(event_id)
    return {"event_id": str(event_id), "rounds": [_round_dict(r) for r in rounds]}


@router.delete("/rounds/{round_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_round(
    round_id: UUID,
    caller: Caller = Depends(require_roles(*STAFF_ROLES)),
    scoring: ScoringService = Depends(get_scoring_service),
):
    """Delete a round together with its scores."""
    await scoring.delete_round(round_id)


@router.put("/teams/{team_id}/scores/{round_id}")
async def set_score(
    team_id: UUID,
    round_id: UUID,
    body: ScoreSubmit,
    caller: Caller = Depends(require_roles(*MENTOR_ROLES)),
    scoring: ScoringService = Depends(get_scoring_service),
):
    record = await scoring.set_score(
        team_id, round_id, body.score, caller.user_id, body.notes,
    )
    return record.to_dict()


@router.post("/rounds/{round_id}/scores/by-token")
async def set_score_by_token(
    round_id: UUID,
    body: ScoreByToken,
    caller: Caller = Depends(require_roles(*MENTOR_ROLES)),
    scoring: ScoringService = Depends(get_scoring_service),
):
    """Grade a team by scanning any of its members' tokens."""
    record = await scoring.set_score_by_token(
        body.token, round_id, body.score, caller.user_id, body.notes,
    )
    return record.to_dict()


@router.get("/events/{event_id}/leaderboard")
async def leaderboard(
    event_id: UUID,
    caller: Caller = Depends(require_roles(*MENTOR_ROLES)),
    scoring: ScoringService = Depends(get_scoring_service),
):
    entries = await scoring.leaderboard(event_id)
    return {"event_id": str(event_id), "leaderboard": [e.to_dict() for e in entries]}


@router.get("/events/{event_id}/tally")
async def tally(
    event_id: UUID,
    caller: Caller = Depends(require_roles(*MENTOR_ROLES)),
    scoring: ScoringService = Depends(get_scoring_service),
):
    return (await scoring.tally(event_id)).to_dict()
