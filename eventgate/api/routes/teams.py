"""Team Routes — mentors create teams and scan member tokens into them."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from eventgate.api.deps import Caller, MENTOR_ROLES, get_team_service, require_roles
from eventgate.schemas.team import MemberScan, TeamCreate
from eventgate.services.team_formation import TeamFormationService

router = APIRouter(prefix="/api/v1", tags=["teams"])


def _team_dict(team) -> dict:
    return {
        "id": str(team.id),
        "name": team.name,
        "created_at": team.created_at.isoformat(),
        "member_count": team.member_count,
    }


@router.post("/events/{event_id}/teams", status_code=status.HTTP_201_CREATED)
async def create_team(
    event_id: UUID,
    body: TeamCreate,
    caller: Caller = Depends(require_roles(*MENTOR_ROLES)),
    teams: TeamFormationService = Depends(get_team_service),
):
    """Create a team, scanning any initial member tokens in order."""
    creation = await teams.create_team(event_id, body.name, caller.user_id, body.tokens)
    return {
        "team": _team_dict(creation.team),
        "members": [m.to_dict() for m in creation.members],
    }


@router.get("/events/{event_id}/teams")
async def list_teams(
    event_id: UUID,
    caller: Caller = Depends(require_roles(*MENTOR_ROLES)),
    teams: TeamFormationService = Depends(get_team_service),
):
    summaries = await teams.list_teams(event_id)
    return {"event_id": str(event_id), "teams": [_team_dict(t) for t in summaries]}


@router.post("/teams/{team_id}/members")
async def add_member(
    team_id: UUID,
    body: MemberScan,
    caller: Caller = Depends(require_roles(*MENTOR_ROLES)),
    teams: TeamFormationService = Depends(get_team_service),
):
    """Scan a member token into a team. Rejections come back as 200 with a reason."""
    result = await teams.add_member(team_id, body.token, caller.user_id)
    return result.to_dict()


@router.get("/teams/{team_id}/members")
async def list_members(
    team_id: UUID,
    caller: Caller = Depends(require_roles(*MENTOR_ROLES)),
    teams: TeamFormationService = Depends(get_team_service),
):
    """Member registration ids in scan order."""
    member_ids = await teams.members(team_id)
    return {"team_id": str(team_id), "registration_ids": [str(m) for m in member_ids]}


@router.post("/teams/lookup")
async def team_for_token(
    body: MemberScan,
    caller: Caller = Depends(require_roles(*MENTOR_ROLES)),
    teams: TeamFormationService = Depends(get_team_service),
):
    """Find the team a participant's QR token belongs to."""
    return _team_dict(await teams.team_for_token(body.token))
