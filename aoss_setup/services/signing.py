from __future__ import annotations

import logging
from typing import Callable, Optional

from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import ReadOnlyCredentials

from aoss_setup.services.config import AwsConfig


logger = logging.getLogger(__name__)

AOSS_SERVICE_NAME = "aoss"
PAYLOAD_HASH_HEADER = "X-Amz-Content-SHA256"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"

AuthFactory = Callable[[ReadOnlyCredentials, str, str], SigV4Auth]


class AossRequestSigner:
    """Request hook that re-signs data-plane requests for OpenSearch Serverless.

    The OpenSearch client builds requests for its own identity. OpenSearch Serverless
    wants them signed for service "aoss" with the payload marked unsigned, so for each
    request this hook:

    1. overrides the signing service/region in `request.context["signing"]`
    2. detaches the body and drops Content-Length
    3. sets X-Amz-Content-SHA256 to UNSIGNED-PAYLOAD
    4. SigV4-signs method/path/headers (adds X-Amz-Date, Authorization, token)
    5. reattaches the original body bytes

    The returned request is what the transport sends; it is not touched afterwards.
    """

    def __init__(
        self,
        aws: AwsConfig,
        *,
        service_name: str = AOSS_SERVICE_NAME,
        region_name: Optional[str] = None,
        auth_factory: AuthFactory = SigV4Auth,
    ) -> None:
        self._credentials = aws.credentials
        self._service_name = service_name
        self._region_name = region_name or aws.region_name
        self._auth_factory = auth_factory

    def rewrite_and_sign(self, request: AWSRequest) -> AWSRequest:
        signing = dict(request.context.get("signing") or {})
        declared = (signing.get("signing_name"), signing.get("region"))
        signing.update(signing_name=self._service_name, region=self._region_name)
        request.context["signing"] = signing

        body = request.data
        request.data = None
        # HTTPHeaders appends on assignment, so clear before setting.
        del request.headers["Content-Length"]
        del request.headers[PAYLOAD_HASH_HEADER]
        request.headers[PAYLOAD_HASH_HEADER] = UNSIGNED_PAYLOAD

        self._auth_factory(self._credentials, self._service_name, self._region_name).add_auth(request)

        request.data = body

        logger.debug(
            "Signed %s %s for %s/%s (client declared %s/%s)",
            request.method,
            request.url,
            self._service_name,
            self._region_name,
            *declared,
        )
        return request

    def __call__(self, request: AWSRequest) -> AWSRequest:
        return self.rewrite_and_sign(request)
