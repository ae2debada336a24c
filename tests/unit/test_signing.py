"""
Unit tests for SigV4 request signing.
"""

import pytest

from access_log_indexer.ingestion.exceptions import ConfigurationError
from access_log_indexer.pipeline.signing import RequestSigner

URL = "https://search-logs.eu-west-1.es.amazonaws.com/alblogs-2024.01.15/alb-log"


class TestRequestSigner:
    """Tests for RequestSigner."""

    def test_adds_signature_headers(self, credentials):
        """Signed headers carry Authorization and X-Amz-Date."""
        signer = RequestSigner(region="eu-west-1", credentials=credentials)
        headers = signer.sign(
            "POST", URL, b'{"a": 1}', {"Content-Type": "application/json"}
        )

        assert headers["Authorization"].startswith("AWS4-HMAC-SHA256 ")
        assert "Credential=AKIDEXAMPLE/" in headers["Authorization"]
        assert "/eu-west-1/es/aws4_request" in headers["Authorization"]
        assert "X-Amz-Date" in headers
        assert headers["Content-Type"] == "application/json"

    def test_session_token_included(self):
        """Temporary credentials add the security token header."""
        from botocore.credentials import Credentials

        signer = RequestSigner(
            region="us-east-1",
            credentials=Credentials("AKID", "SECRET", token="SESSIONTOKEN"),
        )
        headers = signer.sign("POST", URL, b"{}")
        assert headers["X-Amz-Security-Token"] == "SESSIONTOKEN"

    def test_body_bound_into_signature(self, credentials):
        """Different bodies produce different signatures."""
        signer = RequestSigner(region="eu-west-1", credentials=credentials)
        first = signer.sign("POST", URL, b'{"n": 1}')
        second = signer.sign("POST", URL, b'{"n": 2}')
        assert first["Authorization"] != second["Authorization"]

    def test_custom_service(self, credentials):
        """The service name is part of the credential scope."""
        signer = RequestSigner(region="eu-west-1", service="aoss", credentials=credentials)
        headers = signer.sign("POST", URL, b"{}")
        assert "/eu-west-1/aoss/aws4_request" in headers["Authorization"]

    def test_no_credentials(self, monkeypatch):
        """Missing credentials are a configuration error."""

        class NoCredentialsSession:
            def get_credentials(self):
                return None

        monkeypatch.setattr(
            "access_log_indexer.pipeline.signing.boto3.Session", NoCredentialsSession
        )
        with pytest.raises(ConfigurationError):
            RequestSigner(region="eu-west-1")
