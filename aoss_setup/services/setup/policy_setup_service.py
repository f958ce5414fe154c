from __future__ import annotations

import logging
from typing import Any, Union

from botocore.exceptions import BotoCoreError, ClientError

from aoss_setup.models.policy import PolicyRequest, PolicyType
from aoss_setup.models.results import AlreadyExists, Created, Failed
from aoss_setup.services.setup.control_plane import ControlPlaneError, error_message, is_conflict


logger = logging.getLogger(__name__)

PolicyResult = Union[Created[dict[str, Any]], AlreadyExists[dict[str, Any]], Failed]


class PolicyProvisioningError(ControlPlaneError):
    pass


_CONFLICT_MESSAGES: dict[PolicyType, str] = {
    PolicyType.ENCRYPTION: "The policy name or rules conflict with an existing policy.",
    PolicyType.NETWORK: "A network policy with that name already exists.",
    PolicyType.DATA: "An access policy with that name already exists.",
}

_CREATED_LABELS: dict[PolicyType, str] = {
    PolicyType.ENCRYPTION: "Encryption policy",
    PolicyType.NETWORK: "Network policy",
    PolicyType.DATA: "Access policy",
}


class PolicySetupService:
    """Creates encryption/network security policies and data access policies.

    A ConflictException means a policy with the same (name, type) already exists,
    which is assumed to be left over from a previous run and reported as
    `AlreadyExists`. Any other failure comes back as `Failed` so the caller can
    keep provisioning the remaining, independent policies.
    """

    def __init__(self, *, client: Any) -> None:
        self._client = client

    async def create_policy(self, request: PolicyRequest) -> PolicyResult:
        kwargs: dict[str, Any] = {
            "name": request.name,
            "type": request.type.value,
            "policy": request.policy_json(),
        }
        if request.description:
            kwargs["description"] = request.description

        label = _CREATED_LABELS[request.type]
        try:
            if request.type.is_security_policy:
                resp = await self._client.create_security_policy(**kwargs)
                detail = resp.get("securityPolicyDetail") or {}
            else:
                resp = await self._client.create_access_policy(**kwargs)
                detail = resp.get("accessPolicyDetail") or {}
        except (ClientError, BotoCoreError) as exc:
            if is_conflict(exc):
                logger.info("[ConflictException] %s (name=%s)", _CONFLICT_MESSAGES[request.type], request.name)
                return AlreadyExists(name=request.name, message=error_message(exc))

            logger.error("%s creation failed (name=%s): %s", label, request.name, error_message(exc))
            error = PolicyProvisioningError(
                f"Failed creating {request.type.value} policy (name={request.name}): {error_message(exc)}"
            )
            error.__cause__ = exc
            return Failed(name=request.name, error=error)

        logger.info("%s created: %s", label, detail)
        return Created(name=request.name, detail=detail)
