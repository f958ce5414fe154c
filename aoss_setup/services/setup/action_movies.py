"""Fixed resources for the "action movies" OpenSearch Serverless walkthrough.

Everything here is scoped to names starting with ``action-``: three policies
(encryption, network, data access), the ``action-movies`` SEARCH collection,
and one index holding one document.
"""

from __future__ import annotations

from aoss_setup.models.collection import CollectionRequest, CollectionType
from aoss_setup.models.policy import PolicyRequest, PolicyType

POLICY_NAME = "action-policy"
COLLECTION_NAME = "action-movies"
INDEX_NAME = "action-movies-eighties"
AUTHOR_PRINCIPAL = "arn:aws:iam::654654164204:user/aoss-author"

# Serialized the same way it is sent, including the trailing newline.
DOCUMENT = '{ "title": "Road House", "director": "Rowdy Herrington", "year": "1989" }\n'


def encryption_policy() -> PolicyRequest:
    return PolicyRequest(
        name=POLICY_NAME,
        type=PolicyType.ENCRYPTION,
        description="Encryption policy for Action Movie collections",
        policy={
            "Rules": [
                {"ResourceType": "collection", "Resource": ["collection/action-*"]},
            ],
            "AWSOwnedKey": True,
        },
    )


def network_policy() -> PolicyRequest:
    return PolicyRequest(
        name=POLICY_NAME,
        type=PolicyType.NETWORK,
        description="Network policy for Action Movie collections",
        policy=[
            {
                "Description": "Public access for action movie collection",
                "Rules": [
                    {"ResourceType": "dashboard", "Resource": ["collection/action-*"]},
                    {"ResourceType": "collection", "Resource": ["collection/action-*"]},
                ],
                "AllowFromPublic": True,
            }
        ],
    )


def access_policy(*, principal: str = AUTHOR_PRINCIPAL) -> PolicyRequest:
    return PolicyRequest(
        name=POLICY_NAME,
        type=PolicyType.DATA,
        description="Data access policy for Action Movie collections",
        policy=[
            {
                "Rules": [
                    {
                        "Resource": ["index/action-*/*"],
                        "Permission": [
                            "aoss:CreateIndex",
                            "aoss:DeleteIndex",
                            "aoss:UpdateIndex",
                            "aoss:DescribeIndex",
                            "aoss:ReadDocument",
                            "aoss:WriteDocument",
                        ],
                        "ResourceType": "index",
                    },
                    {
                        "Resource": ["collection/action-*"],
                        "Permission": ["aoss:CreateCollectionItems"],
                        "ResourceType": "collection",
                    },
                ],
                "Principal": [principal],
            }
        ],
    )


def policies(*, principal: str = AUTHOR_PRINCIPAL) -> list[PolicyRequest]:
    return [encryption_policy(), network_policy(), access_policy(principal=principal)]


def collection() -> CollectionRequest:
    return CollectionRequest(name=COLLECTION_NAME, type=CollectionType.SEARCH)
