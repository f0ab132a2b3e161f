"""Intent data models — caller input shape and Dialogflow v2 resource shape."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class IntentInput(BaseModel):
    """One entry of the caller-supplied intent map."""
    intent: str
    training_utterances: list[str] = Field(default_factory=list)


class Part(BaseModel):
    text: str

    model_config = ConfigDict(extra="allow")


class TrainingPhrase(BaseModel):
    type: str = "TYPE_UNSPECIFIED"
    parts: list[Part] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")


class ProviderIntent(BaseModel):
    """Intent resource as Dialogflow stores it.

    ``name`` is assigned by the provider (``projects/<id>/agent/intents/<uuid>``)
    and is absent on create requests.
    """
    name: str | None = None
    display_name: str = Field(default="", alias="displayName")
    webhook_state: int | str = Field(default=0, alias="webhookState")  # 0 / WEBHOOK_STATE_UNSPECIFIED
    training_phrases: list[TrainingPhrase] = Field(default_factory=list, alias="trainingPhrases")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


SyncAction = Literal["fetch_agent", "list", "delete", "create"]


class ItemOutcome(BaseModel):
    """Result of a single remote call made during an intent sync."""
    action: SyncAction
    target: str
    ok: bool
    error: str | None = None


class SyncReport(BaseModel):
    """Ordered per-call outcomes of one intent sync."""
    outcomes: list[ItemOutcome] = Field(default_factory=list)

    def record(self, action: SyncAction, target: str, error: str | None = None) -> ItemOutcome:
        outcome = ItemOutcome(action=action, target=target, ok=error is None, error=error)
        self.outcomes.append(outcome)
        return outcome

    @property
    def deleted(self) -> list[str]:
        return [o.target for o in self.outcomes if o.action == "delete" and o.ok]

    @property
    def created(self) -> list[str]:
        return [o.target for o in self.outcomes if o.action == "create" and o.ok]

    @property
    def failed(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> dict[str, object]:
        return {
            "ok": self.ok,
            "deleted": len(self.deleted),
            "created": len(self.created),
            "failed": len(self.failed),
            "outcomes": [o.model_dump() for o in self.outcomes],
        }
