"""Errors raised by the clients that call the LLM and TTS providers.

Each error carries a stable ``code`` for the JSON body and the HTTP status the
route layer answers with.
"""

from fastapi import status


class UpstreamError(Exception):
    code = "upstream_error"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str, service: str = "upstream"):
        super().__init__(message)
        self.message = message
        self.service = service


class UpstreamUnavailable(UpstreamError):
    code = "upstream_unavailable"


class UpstreamTimeout(UpstreamError):
    code = "upstream_timeout"
    status_code = status.HTTP_504_GATEWAY_TIMEOUT


class UpstreamBadResponse(UpstreamError):
    code = "upstream_bad_response"


class UpstreamNotConfigured(UpstreamError):
    code = "upstream_not_configured"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class TtsKeyMissing(UpstreamNotConfigured):
    code = "tts_key_missing"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self):
        super().__init__("TTS key missing", service="tts")
