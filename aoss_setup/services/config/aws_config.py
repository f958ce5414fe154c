from __future__ import annotations

import os
from dataclasses import dataclass

import botocore.session
from botocore.credentials import ReadOnlyCredentials


@dataclass(frozen=True)
class AwsConfig:
    """Account credentials and region, resolved once per process.

    The same instance is handed to the control-plane client factory and to the
    data-plane request signer so both talk to AWS as the same identity.
    """

    region_name: str
    credentials: ReadOnlyCredentials

    @staticmethod
    def from_env() -> "AwsConfig":
        region_name = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
        if not region_name:
            raise ValueError("Missing required environment variable: AWS_REGION (or AWS_DEFAULT_REGION)")

        session = botocore.session.get_session()
        credentials = session.get_credentials()
        if credentials is None:
            raise ValueError("No AWS credentials available (env vars, profile/SSO, or instance role)")

        return AwsConfig(
            region_name=region_name,
            credentials=credentials.get_frozen_credentials(),
        )
