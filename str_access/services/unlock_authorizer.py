"""
Unlock authorization.

The stay window is the only gate: an unlock is allowed iff the reservation's
access phase is ACTIVE at the time of the request. What happens at the lock
is reported as a result string, never as an authorization failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

import structlog

from str_access.exceptions import (
    AccessNotActiveError,
    InvalidRequestError,
    ReservationNotFoundError,
)
from str_access.metrics import unlock_requests
from str_access.services.access_phase import AccessPhase, evaluate_access_phase
from str_access.services.agent_dispatcher import AgentDispatcher
from str_access.services.observations import ObservationSlot
from str_access.services.property_config import ConfigResolver
from str_access.services.reservation_resolver import ReservationResolver
from str_access.utils.datetime import to_iso, utc_now

logger = structlog.get_logger(__name__)

STUB_OK = "stub-ok"
BLOCKED_NOT_ACTIVE = "blocked-not-active"


@dataclass
class UnlockResult:
    code: str
    step_id: str
    action: str
    result: str
    phase: AccessPhase

    def to_response(self) -> dict[str, Any]:
        return {
            "ok": True,
            "code": self.code,
            "stepId": self.step_id,
            "action": self.action,
            "result": self.result,
        }


class UnlockAuthorizer:
    """
    Authorizes guest unlock requests and forwards them to the property's agent.

    Attributes:
        resolver: Reservation lookup and enrichment
        config_resolver: Property configuration (agent URL)
        dispatcher: Access agent client
        observations: Slot receiving the latest unlock attempt
        clock: Source of the current time
    """

    def __init__(
        self,
        resolver: ReservationResolver,
        config_resolver: ConfigResolver,
        dispatcher: AgentDispatcher,
        observations: ObservationSlot,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.resolver = resolver
        self.config_resolver = config_resolver
        self.dispatcher = dispatcher
        self.observations = observations
        self.clock = clock

    def authorize(self, code: str, step_id: str, action: Optional[str] = None) -> UnlockResult:
        """
        Authorize and perform one unlock action.

        Args:
            code: Guest access code
            step_id: Step the guest is unlocking
            action: Agent action; defaults to ``step_id``

        Returns:
            UnlockResult whose ``result`` is stub-ok, agent-ok (or the agent's
            own result string), agent-error or agent-unreachable

        Raises:
            InvalidRequestError: If code or step_id is empty
            ReservationNotFoundError: If no reservation matches the code
            AccessNotActiveError: If the stay window is not active right now
        """
        code = (code or "").strip()
        step_id = (step_id or "").strip()
        action = (action or "").strip() or step_id

        if not code or not step_id:
            unlock_requests.labels(result="invalid").inc()
            raise InvalidRequestError("Missing code or stepId")

        try:
            resolved = self.resolver.resolve(code)
        except ReservationNotFoundError:
            unlock_requests.labels(result="not-found").inc()
            raise
        reservation = resolved.reservation

        now = self.clock()
        phase = evaluate_access_phase(now, reservation.check_in_iso, reservation.check_out_iso)

        if phase != AccessPhase.ACTIVE:
            self._observe(now, code, step_id, action, BLOCKED_NOT_ACTIVE, phase)
            unlock_requests.labels(result=BLOCKED_NOT_ACTIVE).inc()
            logger.info("unlock_blocked", code=code, step_id=step_id, phase=phase.value)
            raise AccessNotActiveError(phase.value, code=code, step_id=step_id)

        config = self.config_resolver.resolve(code, reservation.property_id or None)
        agent_url = config.agent_url

        result = STUB_OK
        agent_response: Optional[dict[str, Any]] = None
        if agent_url:
            outcome = self.dispatcher.dispatch(agent_url, code, step_id, action)
            result = outcome.result
            agent_response = outcome.response

        self._observe(now, code, step_id, action, result, phase, agent_url, agent_response)
        unlock_requests.labels(result=result).inc()
        logger.info(
            "unlock_dispatched",
            code=code,
            step_id=step_id,
            action=action,
            result=result,
            agent_url=agent_url or "-",
        )

        return UnlockResult(code=code, step_id=step_id, action=action, result=result, phase=phase)

    def _observe(
        self,
        now: datetime,
        code: str,
        step_id: str,
        action: str,
        result: str,
        phase: AccessPhase,
        agent_url: Optional[str] = None,
        agent_response: Optional[dict[str, Any]] = None,
    ) -> None:
        self.observations.record(
            {
                "at": to_iso(now),
                "code": code,
                "stepId": step_id,
                "action": action,
                "result": result,
                "phase": phase.value,
                "agentUrl": agent_url,
                "agentResponse": agent_response,
            }
        )
