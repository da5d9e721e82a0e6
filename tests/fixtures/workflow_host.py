"""Minimal replay host for exercising the middleware hooks.

Mimics how a durable workflow runtime drives a function: every invocation
replays the function from the top, memoized step results are returned from
stored state, and the first step without a stored result runs and ends the
invocation with a ``step-ran`` result for the host to persist.
"""

import hashlib
import json
from typing import Any, Callable, Dict, List, Optional

from workflow_encryption.middleware import EncryptionMiddleware


def hash_step_id(name: str) -> str:
    """Host-side step identifier: SHA-1 hex digest of the step name."""
    return hashlib.sha1(name.encode("utf-8")).hexdigest()


class _StepRan(Exception):
    def __init__(self, step: dict):
        self.step = step


class StepTools:
    """The ``step`` object handed to workflow functions."""

    def __init__(self, state: Dict[str, dict], middleware: EncryptionMiddleware):
        self._state = state
        self._middleware = middleware

    def run(self, name: str, fn: Callable[[], Any]) -> Any:
        step_id = hash_step_id(name)
        if step_id in self._state:
            return self._state[step_id].get("data")

        result = {"id": step_id, "name": name, "op": "StepRun", "data": fn()}
        # The host persists exactly what the hook returns, via JSON.
        persisted = json.loads(json.dumps(self._middleware.transform_step_output(result)))
        raise _StepRan(persisted)


def run_function(
    fn: Callable[..., Any],
    middleware: EncryptionMiddleware,
    steps: Optional[Dict[str, dict]] = None,
    events: Optional[List[dict]] = None,
) -> dict:
    """Run one invocation of ``fn`` and return the execution result."""
    events = events or [{"name": "my-event", "data": {"foo": "bar"}}]
    ctx = middleware.transform_function_input(
        {"event": events[0], "events": events, "steps": steps or {}}
    )
    step = StepTools(ctx["steps"], middleware)

    try:
        data = fn(event=ctx["event"], events=ctx["events"], step=step)
    except _StepRan as ran:
        return {"type": "step-ran", "step": ran.step}
    return {"type": "function-resolved", "data": data}


class RecordingClient:
    """Event client that records the JSON body it would send."""

    def __init__(self, middleware: EncryptionMiddleware):
        self._middleware = middleware
        self.sent: List[dict] = []

    def send(self, *events: dict) -> None:
        body = json.dumps(self._middleware.before_send(events))
        self.sent.extend(json.loads(body))
