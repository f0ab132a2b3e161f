"""Intent sync service — replace a Dialogflow agent's intents with a caller-supplied set."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import ValidationError
from rich.console import Console

from dialogflow_bridge.client import DialogflowClient, decode_json
from dialogflow_bridge.models.intents import (
    IntentInput,
    Part,
    ProviderIntent,
    SyncReport,
    TrainingPhrase,
)
from dialogflow_bridge.utils.errors import BridgeError, ProviderError, SyncAbortedError

logger = logging.getLogger(__name__)
console = Console(stderr=True)


def build_provider_intent(entry: IntentInput) -> ProviderIntent:
    """Convert one input entry into a create-ready Dialogflow intent.

    Each utterance becomes its own training phrase with a single verbatim text part.
    """
    return ProviderIntent(
        displayName=entry.intent,
        webhookState=0,
        trainingPhrases=[
            TrainingPhrase(parts=[Part(text=utterance)])
            for utterance in entry.training_utterances
        ],
    )


def parse_intent_map(raw: Mapping[str, IntentInput | dict[str, Any]]) -> dict[str, IntentInput]:
    """Validate a caller intent map, keeping key order."""
    return {
        key: value if isinstance(value, IntentInput) else IntentInput.model_validate(value)
        for key, value in raw.items()
    }


class SyncStrategy(Protocol):
    """Reconciles the remote intent set against the desired one, recording outcomes."""

    def reconcile(
        self,
        service: IntentSyncService,
        existing: list[ProviderIntent],
        desired: Mapping[str, IntentInput],
        token: str,
        report: SyncReport,
    ) -> None: ...


class ReplaceAllStrategy:
    """Delete every existing intent, then create every desired one. No rollback.

    A failure part-way through can leave the agent with fewer intents than
    either the old or the new set.
    """

    def reconcile(
        self,
        service: IntentSyncService,
        existing: list[ProviderIntent],
        desired: Mapping[str, IntentInput],
        token: str,
        report: SyncReport,
    ) -> None:
        for old in existing:
            if not old.name:
                report.record("delete", old.display_name, "Listed intent has no resource name")
                logger.warning("Skipping delete of unnamed intent %r", old.display_name)
                continue
            target = old.name
            try:
                service.delete_intent(old.name, token)
                report.record("delete", target)
                logger.info("Deleted intent %s", target)
            except BridgeError as e:
                report.record("delete", target, str(e))
                logger.warning("Failed to delete intent %s: %s", target, e)

        for key, entry in desired.items():
            try:
                service.create_intent(build_provider_intent(entry), token)
                report.record("create", entry.intent)
                logger.info("Created intent %s (%s)", entry.intent, key)
            except BridgeError as e:
                report.record("create", entry.intent, str(e))
                logger.warning("Failed to create intent %s (%s): %s", entry.intent, key, e)


class IntentSyncService:
    """Service for listing and replacing intents on one project's agent."""

    def __init__(
        self,
        client: DialogflowClient,
        project_id: str,
        strategy: SyncStrategy | None = None,
        abort_on_list_failure: bool = True,
    ) -> None:
        self._client = client
        self._project_id = project_id
        self._strategy = strategy or ReplaceAllStrategy()
        self._abort_on_list_failure = abort_on_list_failure

    @property
    def agent_path(self) -> str:
        return f"projects/{self._project_id}/agent"

    def get_agent(self, token: str) -> dict[str, Any]:
        """Fetch the agent descriptor."""
        return decode_json(self._client.get(self.agent_path, token))

    def list_intents(self, token: str) -> list[ProviderIntent]:
        """List every intent on the agent."""
        response = self._client.get(f"{self.agent_path}/intents", token)
        data = decode_json(response)
        try:
            return [ProviderIntent.model_validate(i) for i in data.get("intents", [])]
        except (ValidationError, AttributeError, TypeError) as e:
            raise ProviderError(
                f"Unexpected intent listing: {e}",
                status_code=response.status_code,
                detail=data,
            ) from e

    def delete_intent(self, name: str, token: str) -> None:
        """Delete an intent by its full resource name (projects/<id>/agent/intents/<uuid>)."""
        self._client.delete(name, token)

    def create_intent(self, intent: ProviderIntent, token: str) -> dict[str, Any]:
        """Create an intent and return the provider's record of it."""
        body = intent.model_dump(by_alias=True, exclude_none=True)
        return decode_json(self._client.post(f"{self.agent_path}/intents", token, body=body))

    def replace_intents(
        self,
        new_intents: Mapping[str, IntentInput | dict[str, Any]],
        token: str,
    ) -> SyncReport:
        """Replace the agent's intents with ``new_intents``.

        Individual delete/create failures are recorded in the report rather than
        raised, so the report may show a partial result.

        Raises:
            SyncAbortedError: Existing intents could not be listed and
                abort_on_list_failure is set. Nothing was deleted or created.
        """
        desired = parse_intent_map(new_intents)
        report = SyncReport()

        try:
            self.get_agent(token)
            report.record("fetch_agent", self.agent_path)
        except BridgeError as e:
            report.record("fetch_agent", self.agent_path, str(e))
            logger.warning("Failed to fetch agent %s: %s", self.agent_path, e)

        existing: list[ProviderIntent] = []
        try:
            existing = self.list_intents(token)
            report.record("list", f"{self.agent_path}/intents")
        except BridgeError as e:
            report.record("list", f"{self.agent_path}/intents", str(e))
            logger.warning("Failed to list existing intents: %s", e)
            if self._abort_on_list_failure:
                raise SyncAbortedError(f"Could not list existing intents: {e}", report) from e

        console.print(
            f"Replacing {len(existing)} existing intents with {len(desired)} new intents..."
        )
        self._strategy.reconcile(self, existing, desired, token, report)
        console.print(
            f"Deleted {len(report.deleted)}, created {len(report.created)}, "
            f"failed {len(report.failed)}"
        )
        return report
