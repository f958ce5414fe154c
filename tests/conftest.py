"""Shared fakes for the control plane, the aiohttp session and the poller's sleep.

Nothing here talks to AWS: the fakes record every call so tests can assert on
ordering, counts and the exact bytes/headers that would have been sent.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Optional

import pytest
from botocore.credentials import ReadOnlyCredentials
from botocore.exceptions import ClientError

from aoss_setup.services.config import AwsConfig

REGION = "us-east-1"
ENDPOINT = "https://abc123xyz.us-east-1.aoss.amazonaws.com"


def client_error(code: str, operation: str, message: str = "") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)


class FakeControlPlaneClient:
    """In-memory OpenSearch Serverless control plane.

    `statuses` is the sequence of lifecycle states BatchGetCollection reports for a
    created collection; the last one repeats forever.
    """

    def __init__(self, *, statuses: Optional[list[str]] = None, endpoint: str = ENDPOINT) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.security_policies: dict[tuple[str, str], dict[str, Any]] = {}
        self.access_policies: dict[tuple[str, str], dict[str, Any]] = {}
        self.collections: dict[str, dict[str, Any]] = {}
        self.statuses = list(statuses or ["ACTIVE"])
        self.endpoint = endpoint
        self.errors: dict[str, Exception] = {}

    def _record(self, op: str, kwargs: dict[str, Any]) -> None:
        self.calls.append((op, kwargs))
        if op in self.errors:
            raise self.errors[op]

    def ops(self) -> list[str]:
        return [op for op, _ in self.calls]

    async def create_security_policy(self, **kwargs: Any) -> dict[str, Any]:
        self._record("create_security_policy", kwargs)
        key = (kwargs["name"], kwargs["type"])
        if key in self.security_policies:
            raise client_error("ConflictException", "CreateSecurityPolicy", "Policy with name already exists")
        detail = {"name": kwargs["name"], "type": kwargs["type"], "policy": json.loads(kwargs["policy"])}
        self.security_policies[key] = detail
        return {"securityPolicyDetail": detail}

    async def create_access_policy(self, **kwargs: Any) -> dict[str, Any]:
        self._record("create_access_policy", kwargs)
        key = (kwargs["name"], kwargs["type"])
        if key in self.access_policies:
            raise client_error("ConflictException", "CreateAccessPolicy", "Policy with name already exists")
        detail = {"name": kwargs["name"], "type": kwargs["type"], "policy": json.loads(kwargs["policy"])}
        self.access_policies[key] = detail
        return {"accessPolicyDetail": detail}

    async def create_collection(self, **kwargs: Any) -> dict[str, Any]:
        self._record("create_collection", kwargs)
        name = kwargs["name"]
        if name in self.collections:
            raise client_error("ConflictException", "CreateCollection", "Collection already exists")
        detail = {
            "id": f"id-{name}",
            "name": name,
            "status": "CREATING",
            "type": kwargs["type"],
            "arn": f"arn:aws:aoss:{REGION}:123456789012:collection/id-{name}",
            "kmsKeyArn": "auto",
        }
        self.collections[name] = detail
        return {"createCollectionDetail": detail}

    async def batch_get_collection(self, **kwargs: Any) -> dict[str, Any]:
        self._record("batch_get_collection", kwargs)
        details = []
        for name in kwargs["names"]:
            if name not in self.collections:
                continue
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            detail = {"id": f"id-{name}", "name": name, "status": status, "type": "SEARCH"}
            if status == "ACTIVE":
                detail["collectionEndpoint"] = self.endpoint
                detail["dashboardEndpoint"] = self.endpoint.replace("aoss.amazonaws.com", "aoss.amazonaws.com/_dashboards")
            details.append(detail)
        return {"collectionDetails": details, "collectionErrorDetails": []}


class FakeSleep:
    def __init__(self, on_call: Any = None) -> None:
        self.calls: list[float] = []
        self._on_call = on_call

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self._on_call is not None:
            self._on_call(len(self.calls))
        await asyncio.sleep(0)


@dataclass
class SentRequest:
    method: str
    url: str
    data: Optional[bytes]
    headers: dict[str, str]

    def header(self, name: str) -> Optional[str]:
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None


class FakeResponse:
    def __init__(self, status: int, payload: bytes) -> None:
        self.status = status
        self._payload = payload

    async def read(self) -> bytes:
        return self._payload

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc: Any) -> bool:
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession; replies with queued (status, body) pairs."""

    def __init__(self, responses: Optional[list[tuple[int, Any]]] = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[SentRequest] = []

    def queue(self, status: int, body: Any = None) -> None:
        self.responses.append((status, body))

    def request(self, method: str, url: str, *, data: Any = None, headers: Any = None, timeout: Any = None) -> FakeResponse:
        self.requests.append(SentRequest(method=method, url=url, data=data, headers=dict(headers or {})))
        status, body = self.responses.pop(0)
        if isinstance(body, (dict, list)):
            payload = json.dumps(body).encode("utf-8")
        elif isinstance(body, str):
            payload = body.encode("utf-8")
        else:
            payload = body or b""
        return FakeResponse(status, payload)


@pytest.fixture
def aws_config() -> AwsConfig:
    return AwsConfig(
        region_name=REGION,
        credentials=ReadOnlyCredentials("AKIDEXAMPLE", "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY", None),
    )


@pytest.fixture
def control_plane() -> FakeControlPlaneClient:
    return FakeControlPlaneClient()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def http_session() -> FakeSession:
    return FakeSession()
