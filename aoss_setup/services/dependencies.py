from __future__ import annotations

from typing import Any, Optional

import aiohttp

from aoss_setup.services.config import AwsConfig, OpenSearchConfig, PipelineConfig
from aoss_setup.services.opensearch_service import OpenSearchService
from aoss_setup.services.setup.collection_setup_service import CollectionSetupService
from aoss_setup.services.setup.opensearch_setup_service import OpenSearchSetupService
from aoss_setup.services.setup.policy_setup_service import PolicySetupService
from aoss_setup.services.signing import AossRequestSigner


def get_request_signer(aws: AwsConfig) -> AossRequestSigner:
    """Request hook signing data-plane calls for OpenSearch Serverless."""

    return AossRequestSigner(aws)


def get_opensearch_service(
    endpoint: str,
    *,
    aws: AwsConfig,
    session: aiohttp.ClientSession,
) -> OpenSearchService:
    return OpenSearchService(
        OpenSearchConfig.for_endpoint(endpoint, region_name=aws.region_name),
        session=session,
        request_hook=get_request_signer(aws),
    )


def get_opensearch_setup_service(
    *,
    client: Any,
    aws: AwsConfig,
    session: aiohttp.ClientSession,
    config: Optional[PipelineConfig] = None,
) -> OpenSearchSetupService:
    """Wire the provisioning pipeline around an open control-plane client and HTTP session."""

    return OpenSearchSetupService(
        policies=PolicySetupService(client=client),
        collections=CollectionSetupService(client=client),
        data_plane_factory=lambda endpoint: get_opensearch_service(endpoint, aws=aws, session=session),
        config=config or PipelineConfig.from_env(),
    )
