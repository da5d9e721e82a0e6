"""Hook adapter between a workflow host and the encryption service.

The host calls three hooks:

- ``before_send``: outbound events, before they go to the orchestrator
- ``transform_function_input``: stored step results and incoming events,
  before user function code sees them
- ``transform_step_output``: a freshly completed step result, before the
  host persists it

The hooks never decide whether a value "needs" processing. They always call
the service, which leaves plaintext (on decrypt) and envelopes (on encrypt)
untouched.

Usage:
    from workflow_encryption import encryption_middleware

    middleware = encryption_middleware(key=os.environ["APP_SECRET"])
    events = middleware.before_send(events)
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional

from workflow_encryption.service import DEFAULT_STEP_DATA_FIELD, EncryptionService
from workflow_encryption.target import WHOLE_VALUE, EncryptionTarget

logger = logging.getLogger(__name__)

EVENT_DATA_FIELD = "data"


class EncryptionMiddleware:
    """Applies the encryption service at the host's hook points."""

    def __init__(
        self,
        service: EncryptionService,
        encrypt_event_data: bool = False,
        event_target: EncryptionTarget = WHOLE_VALUE,
        step_target: EncryptionTarget = WHOLE_VALUE,
        step_data_field: str = DEFAULT_STEP_DATA_FIELD,
    ):
        """Initialize the middleware.

        Args:
            service: Encryption service shared by all hooks.
            encrypt_event_data: Encrypt the data of outbound events.
            event_target: Selection applied to outbound event data.
            step_target: Selection applied to step payloads.
            step_data_field: Name of the payload field in step entries.
        """
        self.service = service
        self.encrypt_event_data = encrypt_event_data
        self.event_target = event_target
        self.step_target = step_target
        self.step_data_field = step_data_field

    def before_send(self, events: Iterable[Mapping]) -> List[Any]:
        """Encrypt outbound event data when ``encrypt_event_data`` is set.

        Args:
            events: Event payloads shaped ``{"name": ..., "data": ...}``.

        Returns:
            New list of events. Event names, ids and timestamps are untouched.
        """
        events = list(events)
        if not self.encrypt_event_data:
            return events

        result = [self._encrypt_event(event) for event in events]
        logger.debug(f"Encrypted data of {len(result)} outbound event(s)")
        return result

    def _encrypt_event(self, event: Any) -> Any:
        if not isinstance(event, Mapping) or EVENT_DATA_FIELD not in event:
            return event
        updated = dict(event)
        updated[EVENT_DATA_FIELD] = self.service.encrypt_value(
            event[EVENT_DATA_FIELD], self.event_target
        )
        return updated

    def _decrypt_event(self, event: Any) -> Any:
        if not isinstance(event, Mapping) or EVENT_DATA_FIELD not in event:
            return event
        updated = dict(event)
        updated[EVENT_DATA_FIELD] = self.service.decrypt_value(
            event[EVENT_DATA_FIELD], self.event_target
        )
        return updated

    def transform_function_input(self, ctx: Mapping) -> dict:
        """Decrypt stored step results and incoming events for a function run.

        Args:
            ctx: Run input with ``steps`` (step id -> step entry) and
                optionally ``event`` and ``events``.

        Returns:
            Copy of ``ctx`` with step payloads and event data decrypted.
        """
        result = dict(ctx)

        steps = ctx.get("steps")
        if steps:
            result["steps"] = self.service.decrypt_steps(
                steps, field=self.step_data_field, target=self.step_target
            )

        if ctx.get("event") is not None:
            result["event"] = self._decrypt_event(ctx["event"])

        events: Optional[list] = ctx.get("events")
        if events:
            result["events"] = [self._decrypt_event(event) for event in events]

        return result

    def transform_step_output(self, step_result: Mapping) -> dict:
        """Encrypt the payload of a completed step before it is persisted.

        Results without a payload field (for example a step that errored)
        are returned as a plain copy.
        """
        result = dict(step_result)
        if self.step_data_field in result:
            result[self.step_data_field] = self.service.encrypt_value(
                result[self.step_data_field], self.step_target
            )
        return result

    def __repr__(self) -> str:
        return (
            f"EncryptionMiddleware(active={self.service.active_strategy_id!r}, "
            f"encrypt_event_data={self.encrypt_event_data})"
        )


def encryption_middleware(
    key: Any = None,
    *,
    key_file: Any = None,
    encrypt_event_data: bool = False,
    strategy: Any = None,
    legacy_strategies: Optional[list] = None,
    legacy_strategy_ids: Optional[list] = None,
    event_fields: Optional[List[str]] = None,
    step_fields: Optional[List[str]] = None,
) -> EncryptionMiddleware:
    """Build an ``EncryptionMiddleware`` from keyword configuration.

    Raises:
        ConfigurationError: If no key is given ("Missing encryption key").
    """
    from workflow_encryption.config import EncryptionConfig

    kwargs = {
        "key": key,
        "key_file": key_file,
        "encrypt_event_data": encrypt_event_data,
        "strategy": strategy,
        "legacy_strategies": legacy_strategies,
        "legacy_strategy_ids": legacy_strategy_ids,
        "event_fields": event_fields,
        "step_fields": step_fields,
    }
    config = EncryptionConfig(**{k: v for k, v in kwargs.items() if v is not None})
    return config.build_middleware()
