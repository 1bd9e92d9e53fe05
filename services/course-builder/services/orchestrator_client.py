"""
Segment Orchestrator Client

Hands a course over to the segment orchestrator edge function, which
processes segments one after another and writes questions as they are
generated.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from services.errors import OrchestratorError
from services.http_client import NO_RETRY_CONFIG, ResilientHTTPClient


logger = logging.getLogger(__name__)


class OrchestratorClient:
    """Triggers orchestrate-segment-processing for a course"""

    def __init__(
        self,
        functions_url: str,
        service_role_key: str,
        function_name: str = "orchestrate-segment-processing",
        http_client: Optional[ResilientHTTPClient] = None,
    ):
        self.function_name = function_name
        # A trigger is not idempotent: never retry it automatically
        self._http = http_client or ResilientHTTPClient(
            base_url=functions_url,
            timeout=120.0,
            retry_config=NO_RETRY_CONFIG,
            headers={
                "Authorization": f"Bearer {service_role_key}",
                "Content-Type": "application/json",
            },
        )

    async def close(self):
        await self._http.close()

    async def trigger(self, course_id: str) -> Dict[str, Any]:
        """Start processing a course; returns the orchestrator response body."""
        logger.info(f"[ORCHESTRATOR] Triggering segment orchestrator for course {course_id}")
        try:
            response = await self._http.post(
                f"/{self.function_name}",
                json={"course_id": course_id, "check_only": False},
            )
        except httpx.HTTPError as e:
            raise OrchestratorError(f"Failed to trigger orchestrator: {e}") from e

        if not response.is_success:
            logger.error(f"[ORCHESTRATOR] Error triggering orchestrator: {response.text}")
            raise OrchestratorError(
                f"Failed to trigger orchestrator: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            result = response.json()
        except ValueError:
            result = {}
        if not isinstance(result, dict):
            result = {}
        logger.info(f"[ORCHESTRATOR] Orchestrator triggered successfully: {result.get('status')}")
        return result
