"""
Ledger HTTP client tests.

This module contains the source and target client tests:
- v2 schema multi-query and paged collection queries
- v3 create/transact request bodies
- Error mapping (HTTP errors, invalid JSON, request failures)
- Transient failure retries with backoff
- The 401 credential challenge

Run specific test categories:
    pytest -m resilience tests/core/test_ledger_clients.py
    pytest -k "Challenge" tests/core/test_ledger_clients.py
"""

from unittest.mock import Mock, patch

import pytest
import requests

from fluree_migrate.core.errors import (
    SinkError,
    SourceFetchError,
    TargetAPIError,
)
from fluree_migrate.core.platform import (
    FlureeSourceClient,
    FlureeTargetClient,
    PromptCredentialProvider,
    StaticCredentialProvider,
)
from fluree_migrate.core.platform.source_client import SCHEMA_QUERY, collection_query

from fixtures import ADA_ID, BOB_ID, PERSON_SCHEMA_RESPONSE, SOURCE_URL, mock_response, sent_body


TARGET_URL = "http://localhost:58090"


# =============================================================================
# Source Client Tests
# =============================================================================

@pytest.mark.unit
class TestSourceClient:
    """v2 schema and entity queries."""

    def test_fetch_schema(self):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", return_value=mock_response(200, PERSON_SCHEMA_RESPONSE)) as mock_request:
            schema = client.fetch_schema()

        method, url = mock_request.call_args.args
        assert method == "POST"
        assert url == f"{SOURCE_URL}/multi-query"
        assert sent_body(mock_request) == SCHEMA_QUERY
        assert schema["predicates"] == PERSON_SCHEMA_RESPONSE["current_predicates"]
        assert schema["initial_predicates"] == [10]
        assert len(schema["collections"]) == 3

    def test_initial_predicates_are_flattened(self):
        body = dict(PERSON_SCHEMA_RESPONSE, initial_predicates=[[10], [{"_id": 11}]])
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", return_value=mock_response(200, body)):
            schema = client.fetch_schema()
        assert schema["initial_predicates"] == [10, 11]

    def test_schema_response_without_predicates(self):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", return_value=mock_response(200, {"collections": []})):
            with pytest.raises(SourceFetchError) as exc_info:
                client.fetch_schema()
        assert exc_info.value.error_code == "InvalidResponse"

    def test_collection_query(self):
        query = collection_query("person", 4000, 2000)
        assert query["from"] == "person"
        assert query["select"] == ["*"]
        assert query["opts"]["offset"] == 4000
        assert query["opts"]["limit"] == 2000
        assert query["opts"]["compact"] is True

    def test_iter_entities_pages(self):
        client = FlureeSourceClient(SOURCE_URL, page_size=2)
        pages = [
            mock_response(200, [{"_id": ADA_ID, "name": "Ada"}, {"_id": BOB_ID, "name": "Bob"}]),
            mock_response(200, [{"_id": ADA_ID + 2, "name": "Cy"}]),
        ]
        with patch("requests.request", side_effect=pages) as mock_request:
            records = list(client.iter_entities("person"))

        assert [r.subject_id for r in records] == [str(ADA_ID), str(BOB_ID), str(ADA_ID + 2)]
        assert all(r.collection == "person" for r in records)
        assert records[0].values == {"name": "Ada"}
        assert mock_request.call_count == 2
        assert sent_body(mock_request, 0)["opts"]["offset"] == 0
        assert sent_body(mock_request, 1)["opts"]["offset"] == 2
        assert mock_request.call_args.args[1] == f"{SOURCE_URL}/query"

    def test_full_last_page_fetches_once_more(self):
        client = FlureeSourceClient(SOURCE_URL, page_size=1)
        pages = [mock_response(200, [{"_id": ADA_ID}]), mock_response(200, [])]
        with patch("requests.request", side_effect=pages) as mock_request:
            records = list(client.iter_entities("person"))
        assert len(records) == 1
        assert mock_request.call_count == 2

    def test_row_without_id(self):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", return_value=mock_response(200, [{"name": "Ada"}])):
            with pytest.raises(SourceFetchError, match="no _id"):
                list(client.iter_entities("person"))

    def test_page_must_be_a_list(self):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", return_value=mock_response(200, {"error": "nope"})):
            with pytest.raises(SourceFetchError, match="did not return a list"):
                client.fetch_page("person", 0)

    def test_api_key_header(self):
        client = FlureeSourceClient(SOURCE_URL, api_key="secret")
        with patch("requests.request", return_value=mock_response(200, [])) as mock_request:
            client.fetch_page("person", 0)

        headers = mock_request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret"
        assert headers["Content-Type"] == "application/json"

    def test_no_authorization_without_key(self):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", return_value=mock_response(200, [])) as mock_request:
            client.fetch_page("person", 0)
        assert "Authorization" not in mock_request.call_args.kwargs["headers"]


# =============================================================================
# Target Client Tests
# =============================================================================

@pytest.mark.unit
class TestTargetClient:
    """v3 create and transact requests."""

    def test_create_ledger(self):
        client = FlureeTargetClient(TARGET_URL)
        context = {"owl": "http://www.w3.org/2002/07/owl#"}
        insert = [{"@id": "urn:x"}]
        with patch("requests.request", return_value=mock_response(201, {"ledger": "acme/crm", "t": 1})) as mock_request:
            result = client.create_ledger("acme/crm", context, insert)

        assert result["t"] == 1
        assert mock_request.call_args.args[1] == f"{TARGET_URL}/fluree/create"
        assert sent_body(mock_request) == {"ledger": "acme/crm", "@context": context, "insert": insert}

    def test_transact(self):
        client = FlureeTargetClient(TARGET_URL + "/")
        with patch("requests.request", return_value=mock_response(200, {"t": 2})) as mock_request:
            client.transact("acme/crm", {}, [])
        assert mock_request.call_args.args[1] == f"{TARGET_URL}/fluree/transact"

    def test_transact_timeout_default(self):
        client = FlureeTargetClient(TARGET_URL)
        with patch("requests.request", return_value=mock_response(200, {})) as mock_request:
            client.transact("acme/crm", {}, [])
        assert mock_request.call_args.kwargs["timeout"] == 120

    def test_rejected_transaction(self):
        client = FlureeTargetClient(TARGET_URL)
        body = {"error": "db/invalid-transaction", "message": "Invalid IRI"}
        with patch("requests.request", return_value=mock_response(400, body)):
            with pytest.raises(TargetAPIError) as exc_info:
                client.transact("acme/crm", {}, [])

        error = exc_info.value
        assert error.status_code == 400
        assert error.error_code == "db/invalid-transaction"
        assert "Invalid IRI" in error.message
        assert isinstance(error, SinkError)

    def test_requires_url(self):
        with pytest.raises(ValueError):
            FlureeTargetClient("")


# =============================================================================
# Response Handling Tests
# =============================================================================

@pytest.mark.unit
class TestResponseHandling:
    """Mapping of HTTP responses and request failures."""

    def test_empty_body(self):
        client = FlureeTargetClient(TARGET_URL)
        with patch("requests.request", return_value=mock_response(200)):
            assert client.transact("acme/crm", {}, []) == {}

    def test_invalid_json(self):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", return_value=mock_response(200, text="<html>")):
            with pytest.raises(SourceFetchError) as exc_info:
                client.fetch_schema()
        assert exc_info.value.error_code == "InvalidResponse"

    def test_non_json_error_body(self):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", return_value=mock_response(404, text="Not Found")):
            with pytest.raises(SourceFetchError) as exc_info:
                client.fetch_schema()
        assert exc_info.value.status_code == 404
        assert exc_info.value.error_code == "Unknown"

    def test_request_exception_is_not_retried(self):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", side_effect=requests.exceptions.InvalidURL("bad")) as mock_request:
            with pytest.raises(SourceFetchError) as exc_info:
                client.fetch_schema()
        assert exc_info.value.error_code == "RequestError"
        assert mock_request.call_count == 1


# =============================================================================
# Retry Tests
# =============================================================================

@pytest.mark.resilience
@pytest.mark.unit
class TestTransientRetries:
    """Timeouts, connection errors, 429 and 5xx gateway errors are retried."""

    @patch("time.sleep")
    def test_gateway_error_then_success(self, mock_sleep):
        client = FlureeSourceClient(SOURCE_URL)
        responses = [mock_response(503, {"message": "busy"}), mock_response(200, [])]
        with patch("requests.request", side_effect=responses) as mock_request:
            assert client.fetch_page("person", 0) == []
        assert mock_request.call_count == 2

    @patch("time.sleep")
    def test_timeout_then_success(self, mock_sleep):
        client = FlureeTargetClient(TARGET_URL)
        side_effects = [requests.exceptions.Timeout("slow"), mock_response(200, {"t": 1})]
        with patch("requests.request", side_effect=side_effects) as mock_request:
            assert client.transact("acme/crm", {}, []) == {"t": 1}
        assert mock_request.call_count == 2

    @patch("time.sleep")
    def test_connection_error_exhausts_retries(self, mock_sleep):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", side_effect=requests.exceptions.ConnectionError("refused")) as mock_request:
            with pytest.raises(SourceFetchError) as exc_info:
                client.fetch_schema()

        assert exc_info.value.error_code == "RetriesExhausted"
        assert exc_info.value.status_code == 503
        assert mock_request.call_count == 5

    @patch("time.sleep")
    def test_rate_limit_exhausts_retries(self, mock_sleep):
        client = FlureeTargetClient(TARGET_URL)
        with patch("requests.request", return_value=mock_response(429, {}, headers={"Retry-After": "1"})):
            with pytest.raises(TargetAPIError) as exc_info:
                client.transact("acme/crm", {}, [])
        assert exc_info.value.status_code == 429

    def test_client_errors_are_not_retried(self):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", return_value=mock_response(400, {"message": "bad query"})) as mock_request:
            with pytest.raises(SourceFetchError):
                client.fetch_schema()
        assert mock_request.call_count == 1


# =============================================================================
# Credential Challenge Tests
# =============================================================================

@pytest.mark.resilience
@pytest.mark.unit
class TestCredentialChallenge:
    """HTTP 401 asks the CredentialProvider once and retries once."""

    def test_challenge_then_success(self):
        provider = Mock()
        provider.get_credential.return_value = "secret"
        client = FlureeSourceClient(SOURCE_URL, credential_provider=provider)

        responses = [mock_response(401, {"message": "auth"}), mock_response(200, [])]
        with patch("requests.request", side_effect=responses) as mock_request:
            client.fetch_page("person", 0)

        provider.get_credential.assert_called_once_with("source", f"{SOURCE_URL}/query")
        assert "Authorization" not in mock_request.call_args_list[0].kwargs["headers"]
        assert mock_request.call_args_list[1].kwargs["headers"]["Authorization"] == "Bearer secret"
        assert client.api_key == "secret"

    def test_no_provider(self):
        client = FlureeSourceClient(SOURCE_URL)
        with patch("requests.request", return_value=mock_response(401, {})) as mock_request:
            with pytest.raises(SourceFetchError) as exc_info:
                client.fetch_schema()
        assert exc_info.value.status_code == 401
        assert exc_info.value.error_code == "Unauthorized"
        assert mock_request.call_count == 1

    def test_refused_credential(self):
        client = FlureeTargetClient(TARGET_URL, credential_provider=StaticCredentialProvider())
        with patch("requests.request", return_value=mock_response(401, {})):
            with pytest.raises(TargetAPIError) as exc_info:
                client.transact("acme/crm", {}, [])
        assert exc_info.value.error_code == "CredentialRefused"

    def test_rejected_credential(self):
        client = FlureeSourceClient(SOURCE_URL, credential_provider=StaticCredentialProvider("wrong"))
        with patch("requests.request", return_value=mock_response(401, {})) as mock_request:
            with pytest.raises(SourceFetchError) as exc_info:
                client.fetch_schema()
        assert exc_info.value.error_code == "Unauthorized"
        assert mock_request.call_count == 2


@pytest.mark.unit
class TestCredentialProviders:
    """Static and prompting providers."""

    def test_static(self):
        assert StaticCredentialProvider("key").get_credential("source", SOURCE_URL) == "key"
        assert StaticCredentialProvider().get_credential("source", SOURCE_URL) is None

    def test_prompt_strips_answer(self):
        prompt = Mock(return_value="  key \n")
        provider = PromptCredentialProvider(prompt=prompt)

        assert provider.get_credential("target", TARGET_URL) == "key"
        assert "target" in prompt.call_args.args[0]

    def test_prompt_empty_answer_refuses(self):
        assert PromptCredentialProvider(prompt=lambda text: "").get_credential("source", SOURCE_URL) is None

    def test_prompt_closed_input_refuses(self):
        prompt = Mock(side_effect=EOFError)
        assert PromptCredentialProvider(prompt=prompt).get_credential("source", SOURCE_URL) is None
