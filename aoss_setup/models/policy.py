from __future__ import annotations

import json
from enum import Enum
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, ValidationInfo, field_validator


class PolicyType(str, Enum):
    ENCRYPTION = "encryption"
    NETWORK = "network"
    DATA = "data"

    @property
    def is_security_policy(self) -> bool:
        # encryption/network go through CreateSecurityPolicy, data through CreateAccessPolicy
        return self is not PolicyType.DATA


class _PolicyModel(BaseModel):
    # Fields we do not model (newer AWS keys) pass through to policy_json() untouched.
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ResourceRule(_PolicyModel):
    resource_type: str = Field(alias="ResourceType", min_length=1)
    resource: list[str] = Field(alias="Resource", min_length=1)


class EncryptionPolicyDocument(_PolicyModel):
    rules: list[ResourceRule] = Field(alias="Rules", min_length=1)
    aws_owned_key: bool = Field(alias="AWSOwnedKey")
    kms_arn: Optional[str] = Field(default=None, alias="KmsARN")

    @field_validator("kms_arn")
    @classmethod
    def _kms_arn_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("KmsARN must not be blank")
        return value


class NetworkPolicyBlock(_PolicyModel):
    description: Optional[str] = Field(default=None, alias="Description")
    rules: list[ResourceRule] = Field(alias="Rules", min_length=1)
    allow_from_public: Optional[bool] = Field(default=None, alias="AllowFromPublic")
    source_vpces: Optional[list[str]] = Field(default=None, alias="SourceVPCEs")
    source_services: Optional[list[str]] = Field(default=None, alias="SourceServices")


class AccessRule(ResourceRule):
    permission: list[str] = Field(alias="Permission", min_length=1)

    @field_validator("resource_type")
    @classmethod
    def _index_or_collection(cls, value: str) -> str:
        if value not in ("index", "collection"):
            raise ValueError(f"ResourceType must be 'index' or 'collection' (got {value!r})")
        return value


class AccessPolicyBlock(_PolicyModel):
    description: Optional[str] = Field(default=None, alias="Description")
    rules: list[AccessRule] = Field(alias="Rules", min_length=1)
    principal: list[str] = Field(alias="Principal", min_length=1)


NetworkPolicyDocument = Annotated[list[NetworkPolicyBlock], Field(min_length=1)]
AccessPolicyDocument = Annotated[list[AccessPolicyBlock], Field(min_length=1)]
PolicyDocument = Union[EncryptionPolicyDocument, NetworkPolicyDocument, AccessPolicyDocument]

_DOCUMENT_ADAPTERS: dict[PolicyType, TypeAdapter[Any]] = {
    PolicyType.ENCRYPTION: TypeAdapter(EncryptionPolicyDocument),
    PolicyType.NETWORK: TypeAdapter(NetworkPolicyDocument),
    PolicyType.DATA: TypeAdapter(AccessPolicyDocument),
}


class PolicyRequest(BaseModel):
    """A named, typed policy to submit to the OpenSearch Serverless control plane.

    (name, type) is what the control plane uses to detect an existing policy.
    The `policy` document accepts either parsed rules or the raw JSON string and
    is validated against the shape required by `type`:

    - encryption: rules plus the `AWSOwnedKey` flag
    - network: one or more blocks of resource rules, optionally `AllowFromPublic`
    - data: one or more blocks of index/collection rules with permissions and principals
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type: PolicyType
    description: str = ""
    # Validated per `type` below; one of the PolicyDocument shapes.
    policy: Any

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must be provided")
        return value

    @field_validator("policy", mode="before")
    @classmethod
    def _validate_document_for_type(cls, value: Any, info: ValidationInfo) -> Any:
        policy_type = info.data.get("type")
        if policy_type is None:
            raise ValueError("policy cannot be validated without a valid type")

        adapter = _DOCUMENT_ADAPTERS[policy_type]
        try:
            if isinstance(value, (str, bytes)):
                return adapter.validate_json(value)
            return adapter.validate_python(value)
        except ValidationError as exc:
            raise ValueError(f"Invalid {policy_type.value} policy document: {exc}") from exc

    def policy_json(self) -> str:
        """Serialize the document the way the control plane expects it (AWS field names)."""

        adapter = _DOCUMENT_ADAPTERS[self.type]
        dumped = adapter.dump_python(self.policy, mode="json", by_alias=True, exclude_none=True)
        return json.dumps(dumped)
