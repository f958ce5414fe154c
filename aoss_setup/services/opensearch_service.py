from __future__ import annotations

import asyncio
import json
import logging
from http import HTTPStatus
from typing import Any, Callable, Optional, Union
from urllib.parse import quote

import aiohttp
from botocore.awsrequest import AWSRequest

from aoss_setup.services.config import OpenSearchConfig


logger = logging.getLogger(__name__)

RequestHook = Callable[[AWSRequest], AWSRequest]


class OpenSearchServiceError(RuntimeError):
    pass


class OpenSearchAuthError(OpenSearchServiceError):
    pass


class OpenSearchIndexAlreadyExistsError(OpenSearchServiceError):
    pass


class OpenSearchService:
    """Minimal OpenSearch data-plane client over aiohttp.

    Every request is first built as a plain `AWSRequest` carrying the client's own
    identity (`config.service_name`/`config.region_name` under `context["signing"]`),
    then passed through `request_hook` right before it goes out. The hook is where
    authentication happens; without one, requests are sent unsigned.
    """

    def __init__(
        self,
        config: OpenSearchConfig,
        *,
        session: aiohttp.ClientSession,
        request_hook: Optional[RequestHook] = None,
    ) -> None:
        self._config = config
        self._session = session
        self._request_hook = request_hook

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    def build_request(
        self,
        *,
        method: str,
        path: str,
        body: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> AWSRequest:
        """Build the request exactly as it would be sent without any hook."""

        if not path.startswith("/"):
            path = "/" + path

        effective_headers: dict[str, str] = {"Accept": "application/json"}
        if headers:
            effective_headers.update(headers)

        if body is not None:
            if "content-type" not in {k.lower() for k in effective_headers}:
                effective_headers["Content-Type"] = "application/json"
            effective_headers["Content-Length"] = str(len(body))

        request = AWSRequest(
            method=method.upper(),
            url=f"{self._config.endpoint}{path}",
            data=body,
            headers=effective_headers,
        )
        request.context["signing"] = {
            "signing_name": self._config.service_name,
            "region": self._config.region_name,
        }
        return request

    async def _send(
        self,
        *,
        method: str,
        path: str,
        body: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> tuple[int, bytes]:
        request = self.build_request(method=method, path=path, body=body, headers=headers)

        if self._request_hook is not None:
            try:
                request = self._request_hook(request)
            except Exception as exc:
                logger.exception("OpenSearch request hook failed (method=%s path=%s)", method, path)
                raise OpenSearchServiceError("Failed to prepare OpenSearch request") from exc

        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
        try:
            async with self._session.request(
                request.method,
                request.url,
                data=request.data,
                headers=dict(request.headers.items()),
                timeout=timeout,
            ) as resp:
                return (resp.status, await resp.read() or b"")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.exception("OpenSearch request failed (method=%s path=%s)", method, path)
            raise OpenSearchServiceError("OpenSearch request failed") from exc

    @staticmethod
    def _validate_index_name(index_name: str) -> None:
        if not index_name or not index_name.strip():
            raise ValueError("index_name must be provided")

    @staticmethod
    def _parse_json(payload: bytes) -> dict[str, Any]:
        if not payload:
            return {}
        try:
            parsed = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            return {}
        return parsed if isinstance(parsed, dict) else {}

    @staticmethod
    def _details(payload: bytes) -> str:
        try:
            return payload.decode("utf-8") if payload else ""
        except UnicodeDecodeError:
            return ""

    def _raise_for_status(self, *, status: int, payload: bytes, action: str) -> None:
        details = self._details(payload)
        if status in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN):
            raise OpenSearchAuthError(f"OpenSearch rejected request signature ({action}) HTTP {status} {details}".strip())
        raise OpenSearchServiceError(f"Failed to {action} HTTP {status} {details}".strip())

    async def create_index(
        self,
        *,
        index_name: str,
        mappings: Optional[dict[str, Any]] = None,
        settings: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Create an index (PUT /{index}).

        Returns:
            The parsed response body, typically
            {"acknowledged": true, "shards_acknowledged": true, "index": "..."}.

        Raises:
            OpenSearchIndexAlreadyExistsError: if an index with the same name already exists.
            OpenSearchAuthError: if the request signature was rejected.
            OpenSearchServiceError: for unexpected OpenSearch/AWS failures.
        """

        self._validate_index_name(index_name)

        body: Optional[bytes] = None
        if mappings or settings:
            payload_obj: dict[str, Any] = {}
            if mappings:
                payload_obj["mappings"] = mappings
            if settings:
                payload_obj["settings"] = settings
            body = json.dumps(payload_obj).encode("utf-8")

        status, payload = await self._send(method="PUT", path=f"/{index_name}", body=body)

        if status in (HTTPStatus.OK, HTTPStatus.CREATED):
            return self._parse_json(payload)

        error = self._parse_json(payload).get("error")
        if isinstance(error, dict) and error.get("type") == "resource_already_exists_exception":
            raise OpenSearchIndexAlreadyExistsError(f"Index already exists: {index_name}")

        self._raise_for_status(status=status, payload=payload, action=f"create OpenSearch index (index={index_name})")
        return {}  # pragma: no cover

    async def index_document(
        self,
        *,
        index_name: str,
        document: Union[dict[str, Any], str, bytes],
        document_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Index one document.

        Without `document_id` the server assigns one (POST /{index}/_doc);
        with it the document is created or replaced (PUT /{index}/_doc/{id}).
        `document` may be a dict or an already-serialized JSON string/bytes.
        """

        self._validate_index_name(index_name)

        if isinstance(document, dict):
            body = json.dumps(document).encode("utf-8")
        elif isinstance(document, str):
            body = document.encode("utf-8")
        else:
            body = document

        if document_id is None:
            method, path = "POST", f"/{index_name}/_doc"
        else:
            if not document_id.strip():
                raise ValueError("document_id must not be blank")
            method, path = "PUT", f"/{index_name}/_doc/{quote(document_id, safe='')}"

        status, payload = await self._send(method=method, path=path, body=body)

        if status in (HTTPStatus.OK, HTTPStatus.CREATED):
            return self._parse_json(payload)

        self._raise_for_status(
            status=status,
            payload=payload,
            action=f"index OpenSearch document (index={index_name}, id={document_id})",
        )
        return {}  # pragma: no cover
