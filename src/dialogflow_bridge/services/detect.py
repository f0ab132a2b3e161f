"""Query relay — forward one utterance to the agent's detectIntent endpoint."""

from __future__ import annotations

from typing import Any

from dialogflow_bridge.client import DialogflowClient, decode_json
from dialogflow_bridge.config import DetectionProfile


class QueryRelay:
    """Service for relaying utterances to a Dialogflow session.

    Unless a session id is passed, every caller shares the profile's fixed
    session, so they also share one conversation context on the remote side.
    """

    def __init__(self, client: DialogflowClient, profile: DetectionProfile, project_id: str) -> None:
        self._client = client
        self._profile = profile
        self._project_id = profile.project_id or project_id

    def session_path(self, session_id: str | None = None) -> str:
        session = session_id or self._profile.session_id
        return f"projects/{self._project_id}/agent/sessions/{session}"

    def build_request(self, utterance: str) -> dict[str, Any]:
        return {
            "queryInput": {
                "text": {
                    "text": utterance,
                    "languageCode": self._profile.language_code,
                },
            },
            "queryParams": {
                "timeZone": self._profile.time_zone,
            },
        }

    def detect_intent(
        self,
        utterance: str,
        token: str,
        session_id: str | None = None,
    ) -> dict[str, Any]:
        """Send an utterance and return the provider's response body untouched.

        Raises:
            ProviderError: With the provider's error body as ``detail``.
            TransportError: If the API could not be reached.
        """
        response = self._client.post(
            f"{self.session_path(session_id)}:detectIntent",
            token,
            body=self.build_request(utterance),
        )
        return decode_json(response)
