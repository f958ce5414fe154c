from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from aoss_setup.models.collection import CollectionHandle, CollectionRequest, CollectionState, CollectionStatus
from aoss_setup.models.results import AlreadyExists, Created
from aoss_setup.services.setup.control_plane import ControlPlaneError, error_message, is_conflict


logger = logging.getLogger(__name__)

CollectionResult = Union[Created[CollectionHandle], AlreadyExists[CollectionHandle]]
Sleep = Callable[[float], Awaitable[Any]]


class CollectionProvisioningError(ControlPlaneError):
    pass


class CollectionFailedError(CollectionProvisioningError):
    pass


class CollectionTimeoutError(CollectionProvisioningError):
    pass


class CollectionWaitCancelledError(CollectionProvisioningError):
    pass


class CollectionSetupService:
    """OpenSearch Serverless collection lifecycle: create, look up, wait for ACTIVE."""

    _DEFAULT_POLL_INTERVAL_SECONDS: float = 30.0
    _DEFAULT_MAX_POLL_ATTEMPTS: int = 60

    def __init__(self, *, client: Any, sleep: Sleep = asyncio.sleep) -> None:
        self._client = client
        self._sleep = sleep

    async def create_collection(self, request: CollectionRequest) -> CollectionResult:
        """Create the collection, or re-resolve it by name if it already exists.

        Raises:
            CollectionProvisioningError: for anything other than a ConflictException,
                or if an existing collection cannot be found after a conflict.
        """

        kwargs: dict[str, Any] = {"name": request.name, "type": request.type.value}
        if request.description:
            kwargs["description"] = request.description

        try:
            resp = await self._client.create_collection(**kwargs)
        except (ClientError, BotoCoreError) as exc:
            if not is_conflict(exc):
                raise CollectionProvisioningError(
                    f"Failed creating OpenSearch Serverless collection (collection={request.name}, "
                    f"type={request.type.value}): {error_message(exc)}"
                ) from exc

            logger.info(
                "[ConflictException] A collection with this name already exists (collection=%s).",
                request.name,
            )
            existing = await self.get_collection_status(request.name)
            if existing is None:
                raise CollectionProvisioningError(
                    f"Collection reported as existing but could not be looked up: {request.name}"
                ) from exc
            return AlreadyExists(name=request.name, message=error_message(exc), detail=existing.to_handle())

        try:
            handle = CollectionHandle.from_response(resp.get("createCollectionDetail") or {})
        except ValidationError as exc:
            raise CollectionProvisioningError(f"Unexpected CreateCollection response for {request.name}") from exc

        logger.info("Collection creation started: %s (id=%s, status=%s)", handle.name, handle.id, handle.status.value)
        return Created(name=request.name, detail=handle)

    async def get_collection_status(self, name: str) -> Optional[CollectionStatus]:
        """Single BatchGetCollection lookup; None if the control plane doesn't know the name (yet)."""

        if not name or not name.strip():
            raise ValueError("collection name must be provided")

        try:
            resp = await self._client.batch_get_collection(names=[name])
        except (ClientError, BotoCoreError) as exc:
            raise CollectionProvisioningError(
                f"Failed looking up collection status: {name}: {error_message(exc)}"
            ) from exc

        details = resp.get("collectionDetails") or []
        if not details:
            return None

        try:
            return CollectionStatus.from_response(details[0])
        except ValidationError as exc:
            raise CollectionProvisioningError(f"Unexpected BatchGetCollection response for {name}") from exc

    async def wait_until_active(
        self,
        name: str,
        *,
        poll_interval_seconds: float = _DEFAULT_POLL_INTERVAL_SECONDS,
        max_attempts: Optional[int] = _DEFAULT_MAX_POLL_ATTEMPTS,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """Poll the collection status at a fixed interval until it is ACTIVE; return its endpoint.

        One lookup per attempt, one `poll_interval_seconds` sleep between attempts.
        `max_attempts=None` never gives up while the collection stays CREATING.

        Raises:
            CollectionFailedError: the collection went FAILED or DELETING.
            CollectionTimeoutError: still not ACTIVE after `max_attempts` lookups.
            CollectionWaitCancelledError: `cancel_event` was set.
            CollectionProvisioningError: a lookup failed (not retried).
        """

        attempts = 0
        while True:
            self._check_cancelled(name, cancel_event)

            status = await self.get_collection_status(name)
            attempts += 1

            if status is not None and status.status is CollectionState.ACTIVE:
                if not status.endpoint:
                    raise CollectionProvisioningError(f"Collection is ACTIVE but has no endpoint: {name}")
                logger.info("Collection successfully created: %s", status.model_dump(by_alias=True))
                return status.endpoint

            if status is not None and status.status.is_terminal_failure:
                raise CollectionFailedError(
                    f"Collection entered unexpected status after creation: {name} (status={status.status.value})"
                )

            if max_attempts is not None and attempts >= max_attempts:
                raise CollectionTimeoutError(
                    f"Timed out waiting for collection to become ACTIVE: {name} (attempts={attempts})"
                )

            logger.info("Creating collection... (collection=%s, attempt=%d)", name, attempts)
            await self._pause(name, poll_interval_seconds, cancel_event)

    @staticmethod
    def _check_cancelled(name: str, cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise CollectionWaitCancelledError(f"Cancelled while waiting for collection: {name}")

    async def _pause(self, name: str, seconds: float, cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is None:
            await self._sleep(seconds)
            return

        sleeper = asyncio.ensure_future(self._sleep(seconds))
        cancelled = asyncio.ensure_future(cancel_event.wait())
        done, pending = await asyncio.wait({sleeper, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        if cancelled in done:
            self._check_cancelled(name, cancel_event)
