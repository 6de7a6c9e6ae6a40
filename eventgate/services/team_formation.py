"""Team Formation — builds teams by scanning member tokens, one team per registration.

Invariants:
    - A registration belongs to at most one team per event (unique constraint on
      team_members); a lost insert race is re-resolved, never reported as accepted
    - Member-add outcomes are returned as AddMemberResult, never raised
    - Only an unknown team raises (ResourceNotFoundError)
    - Members keep scan order
    - create_team screens every initial token before the team is stored: one bad,
      foreign, already-placed or repeated token and nothing is created

Design Decisions:
    - Rescanning a member into the same team is already-scanned (info), not an error:
      mentors rescan freely while forming teams
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence
from uuid import UUID

from eventgate.core.domain_types import MembershipOutcome
from eventgate.core.errors import (
    ErrorContext, ErrorSeverity, InvalidTokenError, PolicyViolationError,
    ResourceNotFoundError,
)
from eventgate.core.leaderboard import TeamSummary
from eventgate.core.repository_protocols import EventStore, TeamLike, TeamStore
from eventgate.services.token_service import TokenService

logger = logging.getLogger(__name__)

MAX_TEAM_NAME_LENGTH = 100


@dataclass(frozen=True)
class AddMemberResult:
    outcome: MembershipOutcome
    team_name: str | None = None
    detail: str | None = None
    registration_id: UUID | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome == MembershipOutcome.ACCEPTED

    @property
    def severity(self) -> ErrorSeverity | None:
        if self.accepted:
            return None
        if self.outcome == MembershipOutcome.ALREADY_SCANNED:
            return ErrorSeverity.INFO
        return ErrorSeverity.WARNING

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "reason": None if self.accepted else self.outcome.value,
            "severity": self.severity.value if self.severity else None,
            "team_name": self.team_name,
            "detail": self.detail,
            "registration_id": str(self.registration_id) if self.registration_id else None,
        }


@dataclass
class TeamCreation:
    team: TeamSummary
    members: list[AddMemberResult] = field(default_factory=list)


class TeamMembersRejectedError(PolicyViolationError):
    """At least one initial member token failed screening; no team was stored."""
    def __init__(self, results: Sequence[AddMemberResult], event_id: UUID):
        first = next(r for r in results if not r.accepted)
        super().__init__(
            first.detail or "Team member rejected",
            "TEAM_MEMBERS_REJECTED",
            ErrorContext(event_id=str(event_id)),
        )
        self.results = list(results)

    def to_response(self) -> dict:
        body = super().to_response()
        body["error"]["members"] = [r.to_dict() for r in self.results]
        return body


class TeamFormationService:
    """Team creation, listing and member scans."""

    def __init__(self, tokens: TokenService, events: EventStore, teams: TeamStore):
        self.tokens = tokens
        self.events = events
        self.teams = teams

    async def add_member(
        self, team_id: UUID, token: str, added_by: UUID,
    ) -> AddMemberResult:
        team = await self.teams.get(team_id)
        if team is None:
            raise ResourceNotFoundError("Team", str(team_id))
        return await self._add(team.id, team.name, team.event_id, token, added_by)

    async def _screen(
        self, team_id: UUID | None, event_id: UUID, token: str,
    ) -> AddMemberResult:
        """Resolve a token for the event. ACCEPTED here means placeable, not placed."""
        try:
            _, registration = await self.tokens.resolve(token)
        except InvalidTokenError as e:
            return AddMemberResult(MembershipOutcome.INVALID_TOKEN, detail=e.message)

        registration_id = registration.id
        if registration.event_id != event_id:
            return AddMemberResult(
                MembershipOutcome.NOT_FOUND,
                detail="Registration not found for this event",
                registration_id=registration_id,
            )

        existing = await self.teams.team_of(event_id, registration_id)
        if existing is not None:
            return self._already_placed(team_id, existing, registration_id)
        return AddMemberResult(MembershipOutcome.ACCEPTED, registration_id=registration_id)

    async def _add(
        self, team_id: UUID, team_name: str, event_id: UUID, token: str, added_by: UUID,
    ) -> AddMemberResult:
        result = await self._screen(team_id, event_id, token)
        if result.accepted:
            result = await self._place(
                team_id, team_name, event_id, result.registration_id, added_by,
            )
        if not result.accepted:
            logger.info(
                "Team member rejected",
                extra={
                    "team_id": team_id,
                    "registration_id": result.registration_id,
                    "outcome": result.outcome.value,
                },
            )
        return result

    async def _place(
        self,
        team_id: UUID,
        team_name: str,
        event_id: UUID,
        registration_id: UUID,
        added_by: UUID,
    ) -> AddMemberResult:
        if await self.teams.add_member(team_id, event_id, registration_id, added_by):
            logger.info(
                "Team member added",
                extra={"team_id": team_id, "registration_id": registration_id},
            )
            return AddMemberResult(
                MembershipOutcome.ACCEPTED, team_name, registration_id=registration_id,
            )
        # Lost the insert race: report where the registration actually landed
        existing = await self.teams.team_of(event_id, registration_id)
        return self._already_placed(team_id, existing, registration_id)

    @staticmethod
    def _already_placed(
        team_id: UUID | None, existing: TeamLike | None, registration_id: UUID,
    ) -> AddMemberResult:
        if existing is None or existing.id == team_id:
            return AddMemberResult(
                MembershipOutcome.ALREADY_SCANNED,
                existing.name if existing else None,
                "Participant already scanned into this team",
                registration_id,
            )
        return AddMemberResult(
            MembershipOutcome.ALREADY_ON_TEAM,
            existing.name,
            f"Participant is already on team {existing.name}",
            registration_id,
        )

    async def create_team(
        self,
        event_id: UUID,
        name: str,
        created_by: UUID,
        tokens: Sequence[str] = (),
    ) -> TeamCreation:
        """Create a team with its initial members in the order given.

        Raises TeamMembersRejectedError, before anything is stored, when any token
        is invalid, belongs to another event, is already on a team or is repeated.
        """
        name = name.strip()
        if not name or len(name) > MAX_TEAM_NAME_LENGTH:
            raise PolicyViolationError(
                f"Team names must be 1-{MAX_TEAM_NAME_LENGTH} characters",
                "INVALID_TEAM_NAME",
                ErrorContext(event_id=str(event_id)),
            )
        if await self.events.get(event_id) is None:
            raise ResourceNotFoundError("Event", str(event_id))

        screened: list[AddMemberResult] = []
        seen: set[UUID] = set()
        for token in tokens:
            result = await self._screen(None, event_id, token)
            if result.accepted and result.registration_id in seen:
                result = AddMemberResult(
                    MembershipOutcome.ALREADY_SCANNED,
                    detail="Cannot add the same participant twice",
                    registration_id=result.registration_id,
                )
            if result.registration_id is not None:
                seen.add(result.registration_id)
            screened.append(result)
        if not all(r.accepted for r in screened):
            logger.info("Team creation rejected", extra={"event_id": event_id})
            raise TeamMembersRejectedError(screened, event_id)

        team = await self.teams.create(event_id, name, created_by)
        team_id, team_name, created_at = team.id, team.name, team.created_at
        logger.info("Team created", extra={"event_id": event_id, "team_id": team_id})

        members = [
            await self._place(
                team_id, team_name, event_id, result.registration_id, created_by,
            )
            for result in screened
        ]
        return TeamCreation(
            team=TeamSummary(
                id=team_id,
                name=team_name,
                created_at=created_at,
                member_count=sum(1 for m in members if m.accepted),
            ),
            members=members,
        )

    async def list_teams(self, event_id: UUID) -> list[TeamSummary]:
        teams = await self.teams.list_for_event(event_id)
        counts = await self.teams.member_counts(event_id)
        return [
            TeamSummary(
                id=team.id,
                name=team.name,
                created_at=team.created_at,
                member_count=counts.get(team.id, 0),
            )
            for team in teams
        ]

    async def members(self, team_id: UUID) -> list[UUID]:
        if await self.teams.get(team_id) is None:
            raise ResourceNotFoundError("Team", str(team_id))
        return await self.teams.member_ids(team_id)

    async def team_for_token(self, token: str) -> TeamSummary:
        """The team a participant's token belongs to. Raises InvalidTokenError."""
        _, registration = await self.tokens.resolve(token)
        team = await self.teams.team_of(registration.event_id, registration.id)
        if team is None:
            raise ResourceNotFoundError("Team for registration", str(registration.id))
        member_ids = await self.teams.member_ids(team.id)
        return TeamSummary(
            id=team.id,
            name=team.name,
            created_at=team.created_at,
            member_count=len(member_ids),
        )
