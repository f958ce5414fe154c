from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, cast

import aioboto3
from botocore.exceptions import ClientError

from aoss_setup.services.config import AwsConfig

CONFLICT_ERROR_CODE = "ConflictException"


class ControlPlaneError(RuntimeError):
    pass


def is_conflict(exc: BaseException) -> bool:
    """True if a control-plane call was rejected because the resource already exists."""

    if not isinstance(exc, ClientError):
        return False
    return (exc.response.get("Error") or {}).get("Code") == CONFLICT_ERROR_CODE


def error_message(exc: BaseException) -> str:
    if isinstance(exc, ClientError):
        return (exc.response.get("Error") or {}).get("Message") or str(exc)
    return str(exc)


@asynccontextmanager
async def open_control_plane_client(aws: AwsConfig) -> AsyncIterator[Any]:
    """Async OpenSearch Serverless (control plane) client bound to the resolved credentials."""

    session: Any = aioboto3.Session(
        aws_access_key_id=aws.credentials.access_key,
        aws_secret_access_key=aws.credentials.secret_key,
        aws_session_token=aws.credentials.token,
        region_name=aws.region_name,
    )
    client_cm = session.client("opensearchserverless", region_name=aws.region_name)
    async with cast(Any, client_cm) as client:
        yield client
