from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from aoss_setup.models.collection import CollectionRequest
from aoss_setup.models.policy import PolicyRequest
from aoss_setup.models.results import Failed
from aoss_setup.services.config import PipelineConfig
from aoss_setup.services.opensearch_service import OpenSearchService
from aoss_setup.services.setup import action_movies
from aoss_setup.services.setup.collection_setup_service import CollectionResult, CollectionSetupService
from aoss_setup.services.setup.policy_setup_service import PolicyProvisioningError, PolicyResult, PolicySetupService


logger = logging.getLogger(__name__)

DataPlaneFactory = Callable[[str], OpenSearchService]


@dataclass(frozen=True)
class SetupPlan:
    """What to provision: policies, then the collection, then one index with one document."""

    policies: list[PolicyRequest]
    collection: CollectionRequest
    index_name: str
    document: Union[dict[str, Any], str]

    @staticmethod
    def action_movies(*, principal: str = action_movies.AUTHOR_PRINCIPAL) -> "SetupPlan":
        return SetupPlan(
            policies=action_movies.policies(principal=principal),
            collection=action_movies.collection(),
            index_name=action_movies.INDEX_NAME,
            document=action_movies.DOCUMENT,
        )


@dataclass
class SetupReport:
    policies: list[PolicyResult] = field(default_factory=list)
    collection: Optional[CollectionResult] = None
    endpoint: Optional[str] = None
    index_response: dict[str, Any] = field(default_factory=dict)
    document_response: dict[str, Any] = field(default_factory=dict)


class OpenSearchSetupService:
    """Provisioning pipeline for an OpenSearch Serverless collection.

    Steps, in order:
    1) Create each policy (independent of each other; conflicts are fine).
    2) Create the collection (a conflict re-resolves the existing one).
    3) Wait for the collection to become ACTIVE and take its endpoint.
    4) Against that endpoint (requests signed by the data-plane hook): create the
       index, then index the document.

    Conflicts are logged and treated as success. A non-conflict policy failure does
    not stop the other policies, but stops the pipeline before the collection step.
    Every other failure propagates; nothing is retried.
    """

    def __init__(
        self,
        *,
        policies: PolicySetupService,
        collections: CollectionSetupService,
        data_plane_factory: DataPlaneFactory,
        config: Optional[PipelineConfig] = None,
    ) -> None:
        self._policies = policies
        self._collections = collections
        self._data_plane_factory = data_plane_factory
        self._config = config or PipelineConfig()

    async def setup_opensearch_environment(
        self,
        plan: SetupPlan,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> SetupReport:
        report = SetupReport()

        report.policies = await self._setup_policies(plan.policies)

        report.collection = await self._collections.create_collection(plan.collection)

        report.endpoint = await self._collections.wait_until_active(
            plan.collection.name,
            poll_interval_seconds=self._config.poll_interval_seconds,
            max_attempts=self._config.max_poll_attempts,
            cancel_event=cancel_event,
        )

        data_plane = self._data_plane_factory(report.endpoint)

        report.index_response = await data_plane.create_index(index_name=plan.index_name)
        logger.info("Creating index: %s", report.index_response)

        report.document_response = await data_plane.index_document(index_name=plan.index_name, document=plan.document)
        logger.info("Adding document: %s", report.document_response)

        return report

    async def _setup_policies(self, requests: list[PolicyRequest]) -> list[PolicyResult]:
        results: list[PolicyResult] = []
        for request in requests:
            results.append(await self._policies.create_policy(request))

        failures = [r for r in results if isinstance(r, Failed)]
        if failures:
            summary = ", ".join(str(f.error) for f in failures)
            raise PolicyProvisioningError(f"{len(failures)} policy request(s) failed: {summary}") from failures[0].error

        return results
