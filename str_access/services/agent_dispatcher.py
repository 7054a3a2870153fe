"""
Client for property access agents.

An access agent is a small per-property HTTP service that drives the
physical locks. The dispatcher POSTs one unlock action and reduces the
answer to an outcome string; it never raises to its caller.
"""

from __future__ import annotations

import json
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import requests
import structlog

from str_access.config import AGENT_TIMEOUT_SECONDS
from str_access.exceptions import AgentDispatchError
from str_access.metrics import agent_latency

logger = structlog.get_logger(__name__)

AGENT_OK = "agent-ok"
AGENT_ERROR = "agent-error"
AGENT_UNREACHABLE = "agent-unreachable"

# Agents answer with a small JSON object; anything larger is cut off
MAX_RESPONSE_BYTES = 64 * 1024


@dataclass
class DispatchOutcome:
    """Result string plus whatever the agent sent back (for diagnostics)."""

    result: str
    response: Optional[dict[str, Any]]


def build_unlock_url(agent_url: str, action: str) -> str:
    """
    Build ``{agent_url}/unlock/{action}``.

    Example:
        >>> build_unlock_url("http://agent.local/", "front door")
        'http://agent.local/unlock/front%20door'
    """
    return f"{agent_url.rstrip('/')}/unlock/{quote(action, safe='')}"


def _deadline_error(url: str, timeout: float) -> AgentDispatchError:
    return AgentDispatchError(
        f"Agent at {url} did not answer within {timeout}s",
        result=AGENT_UNREACHABLE,
        response={"error": f"timed out after {timeout}s"},
    )


class AgentDispatcher:
    """
    Sends unlock actions to an access agent.

    ``timeout`` bounds the whole call (connect, headers and body). The
    request runs on a worker thread; when the deadline passes the caller
    gets agent-unreachable and the worker stops reading at its next chunk.

    Attributes:
        timeout: Total seconds allowed for one unlock call
        session: requests session (injectable for tests)
    """

    def __init__(
        self,
        timeout: float = AGENT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        max_workers: int = 8,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="agent-dispatch"
        )

    def _read_body(self, res: requests.Response, url: str, deadline: float) -> bytes:
        chunks: list[bytes] = []
        size = 0
        try:
            for chunk in res.iter_content(chunk_size=1024):
                if time.monotonic() > deadline:
                    raise _deadline_error(url, self.timeout)
                chunks.append(chunk)
                size += len(chunk)
                if size >= MAX_RESPONSE_BYTES:
                    break
        except requests.RequestException as err:
            raise AgentDispatchError(
                f"Agent connection to {url} failed: {err}",
                result=AGENT_UNREACHABLE,
                response={"error": str(err)},
            ) from err
        return b"".join(chunks)

    def _send(self, url: str, body: dict[str, str], deadline: float) -> DispatchOutcome:
        try:
            res = self.session.post(url, json=body, timeout=self.timeout, stream=True)
        except requests.RequestException as err:
            raise AgentDispatchError(
                f"Agent unreachable at {url}: {err}",
                result=AGENT_UNREACHABLE,
                response={"error": str(err)},
            ) from err

        try:
            raw = self._read_body(res, url, deadline)
        finally:
            res.close()

        try:
            payload = json.loads(raw) if raw else {}
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if not res.ok or payload.get("ok") is False:
            raise AgentDispatchError(
                f"Agent rejected unlock with status {res.status_code}",
                result=AGENT_ERROR,
                response=payload,
                status_code=res.status_code,
            )

        result = payload.get("result")
        return DispatchOutcome(
            result=str(result) if result else AGENT_OK,
            response=payload,
        )

    def _send_within_deadline(self, url: str, body: dict[str, str]) -> DispatchOutcome:
        deadline = time.monotonic() + self.timeout
        future = self._executor.submit(self._send, url, body, deadline)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            future.cancel()
            raise _deadline_error(url, self.timeout) from None

    def dispatch(self, agent_url: str, code: str, step_id: str, action: str) -> DispatchOutcome:
        """
        POST ``{code, stepId, action}`` to the agent's unlock endpoint.

        Args:
            agent_url: Agent base URL from the property configuration
            code: Guest access code
            step_id: Step being unlocked
            action: Agent action name (path segment)

        Returns:
            DispatchOutcome with result agent-ok (or the agent's own result string),
            agent-error (non-2xx or ok=false) or agent-unreachable (network error
            or the timeout expiring)
        """
        url = build_unlock_url(agent_url, action)
        body = {"code": code, "stepId": step_id, "action": action}

        start_time = time.time()
        try:
            outcome = self._send_within_deadline(url, body)
        except AgentDispatchError as e:
            logger.warning(
                "agent_dispatch_failed",
                url=url,
                result=e.result,
                status_code=e.status_code,
                error=str(e),
            )
            outcome = DispatchOutcome(result=e.result, response=e.response)

        agent_latency.labels(result=outcome.result).observe(time.time() - start_time)
        return outcome
