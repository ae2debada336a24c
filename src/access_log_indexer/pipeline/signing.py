"""
AWS SigV4 request signing for the indexing endpoint.

The signer holds only read-only credentials; every call builds its own
botocore request, so concurrent submissions can share one signer.
"""

import logging
from typing import Any, Optional

import boto3
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest

from ..config.constants import ES_SERVICE_NAME
from ..ingestion.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class RequestSigner:
    """
    Signs HTTP requests for an AWS-hosted Elasticsearch/OpenSearch domain.

    Example:
        signer = RequestSigner(region="eu-west-1")
        headers = signer.sign("POST", url, body, {"Content-Type": "application/json"})
    """

    def __init__(
        self,
        region: str,
        service: str = ES_SERVICE_NAME,
        credentials: Any = None,
    ):
        """
        Initialize signer.

        Args:
            region: AWS region of the domain
            service: Service name bound into the signature
            credentials: botocore credentials (default: resolved from the
                environment, e.g. the Lambda execution role)

        Raises:
            ConfigurationError: If no credentials can be resolved
        """
        if credentials is None:
            credentials = boto3.Session().get_credentials()
        if credentials is None:
            raise ConfigurationError("No AWS credentials found for request signing")

        self.region = region
        self.service = service
        self._credentials = credentials

    def sign(
        self,
        method: str,
        url: str,
        body: bytes,
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, str]:
        """
        Sign a request at the current time.

        Args:
            method: HTTP method
            url: Full request URL
            body: Exact request body bytes that will be sent
            headers: Headers to include in the signature

        Returns:
            Headers with the signature (Authorization, X-Amz-Date and, for
            temporary credentials, X-Amz-Security-Token) added
        """
        request = AWSRequest(method=method, url=url, data=body, headers=headers or {})

        # Refreshable credentials must not change between reading key and token
        freeze = getattr(self._credentials, "get_frozen_credentials", None)
        credentials = freeze() if freeze is not None else self._credentials

        SigV4Auth(credentials, self.service, self.region).add_auth(request)
        return dict(request.headers.items())
