from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar, Optional


@dataclass(frozen=True)
class OpenSearchConfig:
    """Runtime configuration for OpenSearch (data plane) calls.

    `endpoint` should be the collection endpoint including scheme, e.g.
    "https://abc123xyz.eu-west-1.aoss.amazonaws.com".

    `service_name` is the identity the data-plane client declares for its own
    requests. The signing hook may sign for a different one.
    """

    endpoint: str
    region_name: str
    service_name: str
    _DEFAULT_TIMEOUT_SECONDS: ClassVar[float] = 30.0
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS

    @staticmethod
    def _infer_service_name_from_endpoint(endpoint: str) -> str:
        # OpenSearch Serverless collection endpoints commonly end with: .<region>.aoss.amazonaws.com
        if ".aoss.amazonaws.com" in endpoint:
            return "aoss"
        # Managed OpenSearch domains historically use the SigV4 service id "es"
        return "es"

    @staticmethod
    def for_endpoint(
        endpoint: str,
        *,
        region_name: str,
        service_name: Optional[str] = None,
        timeout_env: str = "OPENSEARCH_TIMEOUT_SECONDS",
    ) -> "OpenSearchConfig":
        """Build config for an endpoint discovered at runtime (e.g. a freshly created collection)."""

        if not endpoint or not endpoint.strip():
            raise ValueError("endpoint must be provided")
        if not region_name:
            raise ValueError("region_name must be provided")

        timeout_raw = os.getenv(timeout_env)
        timeout_seconds = OpenSearchConfig._DEFAULT_TIMEOUT_SECONDS
        if timeout_raw:
            try:
                timeout_seconds = float(timeout_raw)
            except ValueError as exc:
                raise ValueError(f"Invalid {timeout_env}; must be a number") from exc

        cleaned_endpoint = endpoint.strip().rstrip("/")
        if "://" not in cleaned_endpoint:
            cleaned_endpoint = f"https://{cleaned_endpoint}"

        return OpenSearchConfig(
            endpoint=cleaned_endpoint,
            region_name=region_name,
            service_name=service_name or OpenSearchConfig._infer_service_name_from_endpoint(cleaned_endpoint),
            timeout_seconds=timeout_seconds,
        )
