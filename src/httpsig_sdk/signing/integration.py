"""
HTTP client integration for request signing

This module connects the signer to the ``requests`` library: an auth
handler that signs prepared requests and a session that applies it to
every outbound request.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional
from urllib.parse import parse_qsl, urlsplit, urlunsplit

import requests
from requests.auth import AuthBase
from requests.models import PreparedRequest

from ..crypto.keys import KeyMaterialCache
from .http_signer import HttpSigner
from .types import RequestDescriptor, SigningConfiguration

logger = logging.getLogger(__name__)


def _group_query(query: str) -> Dict[str, List[str]]:
    grouped: Dict[str, List[str]] = OrderedDict()
    for key, value in parse_qsl(query, keep_blank_values=True):
        grouped.setdefault(key, []).append(value)
    return grouped


def encode_prepared_query(query: str) -> str:
    """
    Re-encode a prepared query string for signing.

    Key names, pair order and valueless keys are kept as sent; only the
    form-style ``+`` for a space becomes ``%20``. A literal plus is already
    ``%2B`` in a prepared URL.
    """
    return query.replace("+", "%20")


def descriptor_from_prepared_request(prepared_request: PreparedRequest) -> RequestDescriptor:
    """
    Build a RequestDescriptor from a prepared ``requests`` request.

    The URL path is used as an already-substituted template and the query
    string is signed exactly as it will be sent.
    """
    parts = urlsplit(prepared_request.url)
    return RequestDescriptor(
        method=prepared_request.method,
        base_path=f"{parts.scheme}://{parts.netloc}",
        path_template=parts.path or "/",
        query_parameters=_group_query(parts.query),
        header_parameters=dict(prepared_request.headers or {}),
        body=prepared_request.body,
        query_string=encode_prepared_query(parts.query)
    )


def sign_prepared_request(prepared_request: PreparedRequest, signer: HttpSigner) -> PreparedRequest:
    """
    Sign a prepared request in place.

    Only the query encoding of the URL may change (``+`` to ``%20``), so the
    server sees the same target that was signed.

    Raises:
        HttpSigningError: If signing fails
    """
    descriptor = descriptor_from_prepared_request(prepared_request)
    result = signer.sign_request(descriptor)

    parts = urlsplit(prepared_request.url)
    if parts.query != descriptor.query_string:
        prepared_request.url = urlunsplit(parts._replace(query=descriptor.query_string))
    prepared_request.headers.update(result.headers)

    logger.debug(f"Signed {prepared_request.method} request to {prepared_request.url}")
    return prepared_request


class HttpSignatureAuth(AuthBase):
    """
    ``requests`` auth handler adding hs2019 signature headers.

    Usage::

        requests.get(url, auth=HttpSignatureAuth(config))
    """

    def __init__(self, config: SigningConfiguration, key_cache: Optional[KeyMaterialCache] = None):
        self.signer = HttpSigner(config, key_cache=key_cache if key_cache is not None else KeyMaterialCache())

    def __call__(self, prepared_request: PreparedRequest) -> PreparedRequest:
        return sign_prepared_request(prepared_request, self.signer)


class SigningSession(requests.Session):
    """
    ``requests.Session`` that signs every request it sends.
    """

    def __init__(self, config: SigningConfiguration, key_cache: Optional[KeyMaterialCache] = None):
        super().__init__()
        self.signing_config = config
        self.auth = HttpSignatureAuth(config, key_cache=key_cache)
        logger.info(f"Configured request signing for key ID: {config.key_id}")


def create_signing_session(
    config: SigningConfiguration,
    key_cache: Optional[KeyMaterialCache] = None
) -> SigningSession:
    """
    Create a new signing session.

    Args:
        config: Signing configuration
        key_cache: Optional shared key cache

    Returns:
        SigningSession: Session that signs all requests
    """
    return SigningSession(config, key_cache=key_cache)
