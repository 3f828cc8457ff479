"""
Test suite for canonical signing string construction
"""

import pytest

from httpsig_sdk.exceptions import ConfigurationError, HeaderNotFoundError
from httpsig_sdk.signing import (
    RequestDescriptor,
    SigningConfiguration,
    build_canonical_input,
    build_query_string,
    build_request_path,
    build_signing_string,
    format_http_date,
)

from conftest import EMPTY_SHA256_DIGEST, GOLDEN_CREATED, GOLDEN_SIGNING_HEADERS


def make_config(headers=GOLDEN_SIGNING_HEADERS, **kwargs):
    return SigningConfiguration(
        key_id="test-key",
        key_file_path="unused.pem",
        signing_headers=headers,
        **kwargs
    )


def make_descriptor(**kwargs):
    values = dict(
        method="GET",
        base_path="http://petstore.swagger.io/v2",
        path_template="/pet/{petId}",
        path_parameters={"petId": 1},
    )
    values.update(kwargs)
    return RequestDescriptor(**values)


class TestRequestTarget:
    """Test (request-target) construction"""

    def test_path_parameters(self):
        assert build_request_path("/pet/{petId}/photos/{id}", {"petId": 1, "id": "a"}) == "/pet/1/photos/a"

    def test_query_string(self):
        query = build_query_string({"status": ["available"], "tags": ["a b", "c"]})
        assert query == "status=available&tags[]=a%20b&tags[]=c"

    def test_query_scalar_values(self):
        assert build_query_string({"limit": 10}) == "limit=10"
        assert build_query_string({}) == ""

    def test_method_is_lowercase_and_base_path_included(self):
        canonical = build_canonical_input(
            make_descriptor(method="POST", query_parameters={"q": ["x y"]}),
            make_config(headers=["(request-target)"]),
            GOLDEN_CREATED
        )
        assert canonical.components["(request-target)"] == "post /v2/pet/1?q=x%20y"


class TestCanonicalString:
    """Test signing string assembly"""

    def test_golden_canonical_string(self):
        signing_string = build_signing_string(make_descriptor(), make_config(), GOLDEN_CREATED)
        assert signing_string == (
            "(request-target): get /v2/pet/1\n"
            "(created): 1610000000\n"
            f"digest: {EMPTY_SHA256_DIGEST}"
        )

    def test_deterministic(self):
        descriptor = make_descriptor(body={"id": 1})
        config = make_config(headers=["(request-target)", "(created)", "host", "date", "digest"])

        first = build_signing_string(descriptor, config, GOLDEN_CREATED)
        second = build_signing_string(descriptor, config, GOLDEN_CREATED)
        assert first.encode() == second.encode()

    def test_empty_signing_headers_default_to_created(self):
        config = make_config(headers=[])
        assert config.signing_headers == ("(created)",)

        signing_string = build_signing_string(make_descriptor(), config, GOLDEN_CREATED)
        assert signing_string == "(created): 1610000000"

    def test_expires(self):
        config = make_config(headers=["(created)", "(expires)"], validity_period_seconds=300)
        canonical = build_canonical_input(make_descriptor(), config, GOLDEN_CREATED)
        assert canonical.components["(expires)"] == str(GOLDEN_CREATED + 300)

    def test_expires_without_validity_equals_created(self):
        canonical = build_canonical_input(make_descriptor(), make_config(headers=["(expires)"]), GOLDEN_CREATED)
        assert canonical.components["(expires)"] == str(GOLDEN_CREATED)

    def test_host_and_date_become_literal_headers(self):
        descriptor = make_descriptor(base_path="https://api.example.com:8443/v2")
        canonical = build_canonical_input(descriptor, make_config(headers=["Host", "Date"]), GOLDEN_CREATED)

        assert canonical.header_names == ["host", "date"]
        assert canonical.components["host"] == "api.example.com"
        assert canonical.components["date"] == "Thu, 07 Jan 2021 06:13:20 GMT"
        assert canonical.literal_headers == {
            "Host": "api.example.com",
            "Date": format_http_date(GOLDEN_CREATED),
        }

    def test_digest_literal_header(self):
        canonical = build_canonical_input(make_descriptor(), make_config(), GOLDEN_CREATED)
        assert canonical.literal_headers == {"Digest": EMPTY_SHA256_DIGEST}

    def test_regular_header_lookup_is_case_insensitive(self):
        descriptor = make_descriptor(header_parameters={"Content-Type": "application/json"})
        canonical = build_canonical_input(descriptor, make_config(headers=["content-type"]), GOLDEN_CREATED)
        assert canonical.to_signing_string() == "content-type: application/json"
        assert canonical.literal_headers == {}

    def test_order_follows_configuration(self):
        descriptor = make_descriptor(header_parameters={"X-Request-Id": "abc"})
        config = make_config(headers=["x-request-id", "(created)", "(request-target)"])
        canonical = build_canonical_input(descriptor, config, GOLDEN_CREATED)
        assert canonical.header_names == ["x-request-id", "(created)", "(request-target)"]


class TestCanonicalErrors:
    """Test error handling during canonicalization"""

    def test_missing_header(self):
        descriptor = make_descriptor(header_parameters={"Accept": "application/json"})
        with pytest.raises(HeaderNotFoundError) as exc_info:
            build_signing_string(descriptor, make_config(headers=["(created)", "X-Missing"]), GOLDEN_CREATED)

        assert exc_info.value.header == "X-Missing"
        assert exc_info.value.details["header"] == "X-Missing"
        assert "does not contain the X-Missing header" in str(exc_info.value)

    def test_invalid_base_path(self):
        descriptor = make_descriptor(base_path="not-a-url")
        with pytest.raises(ConfigurationError, match="Invalid base path"):
            build_signing_string(descriptor, make_config(headers=["host"]), GOLDEN_CREATED)
