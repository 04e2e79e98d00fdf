"""Tests for the Azure Cognitive Services connectors."""

import json
from urllib.parse import parse_qs

import pytest

from flow_connectors.connectors.cognitive_connector import (
    bing_image_search,
    bing_news_search,
    bing_web_search,
    extract_keyphrases,
    named_entity_recognition,
    recognize_language,
    spell_check,
    text_translator,
)
from flow_connectors.connectors.rest_adapter import ArgumentValidationError, ConnectorCallError
from flow_connectors.memory.flow_context import InMemoryFlowContext

SECRET = {"key": "azure-key"}


def text_args(**overrides):
    args = {"secret": SECRET, "text": "Hello world", "store": "analysis", "stopOnError": False}
    args.update(overrides)
    return args


def search_args(**overrides):
    args = {"secret": SECRET, "store": "results", "stopOnError": False}
    args.update(overrides)
    return args


class TestSpellCheck:
    """Tests for spellCheck."""

    @pytest.mark.asyncio
    async def test_form_body_and_params(self, flow, api):
        api.respond(200, json={"_type": "SpellCheck", "flaggedTokens": []})

        await spell_check(flow, text_args(text="Helo wrld", language="en-US"), transport=api.transport)

        request = api.last_request
        assert request.method == "POST"
        assert request.url.path == "/bing/v7.0/spellcheck"
        assert request.url.params["mkt"] == "en-US"
        assert request.url.params["mode"] == "proof"
        assert request.headers["Ocp-Apim-Subscription-Key"] == "azure-key"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert parse_qs(request.content.decode()) == {"text": ["Helo wrld"]}

    @pytest.mark.asyncio
    async def test_writes_to_input_by_default(self, api):
        api.respond(200, json={"flaggedTokens": []})
        flow = InMemoryFlowContext()

        await spell_check(flow, text_args(language="en-US"), transport=api.transport)

        assert flow.input["analysis"] == {"flaggedTokens": []}
        assert "analysis" not in flow.get_full_context()

    @pytest.mark.asyncio
    async def test_missing_language(self, flow, api):
        with pytest.raises(ArgumentValidationError, match="No language defined."):
            await spell_check(flow, text_args(), transport=api.transport)


class TestTextAnalytics:
    """Tests for the Text Analytics connectors."""

    @pytest.mark.asyncio
    async def test_recognize_language(self, flow, api):
        payload = {"documents": [{"id": "1", "detectedLanguages": [{"name": "English", "iso6391Name": "en"}]}]}
        api.respond(200, json=payload)

        await recognize_language(flow, text_args(writeToContext=True), transport=api.transport)

        request = api.last_request
        assert str(request.url) == "https://westus.api.cognitive.microsoft.com/text/analytics/v2.0/languages"
        assert json.loads(request.content) == {"documents": [{"id": "1", "text": "Hello world"}]}
        assert flow.get_full_context()["analysis"] == payload

    @pytest.mark.asyncio
    async def test_extract_keyphrases(self, flow, api):
        api.respond(200, json={"documents": [{"id": "1", "keyPhrases": ["world"]}]})

        await extract_keyphrases(flow, text_args(language="en", writeToContext=True), transport=api.transport)

        request = api.last_request
        assert request.url.path == "/text/analytics/v2.0/keyPhrases"
        assert json.loads(request.content) == {
            "documents": [{"id": "1", "language": "en", "text": "Hello world"}]
        }

    @pytest.mark.asyncio
    async def test_named_entity_recognition(self, flow, api):
        api.respond(200, json={"documents": [{"id": "1", "entities": []}]})

        await named_entity_recognition(flow, text_args(language="de"), transport=api.transport)

        assert api.last_request.url.path == "/text/analytics/v2.1-preview/entities"
        assert flow.input["analysis"] == {"documents": [{"id": "1", "entities": []}]}

    @pytest.mark.asyncio
    async def test_missing_text(self, flow, api):
        with pytest.raises(ArgumentValidationError, match="No text defined."):
            await recognize_language(flow, text_args(text=""), transport=api.transport)

        assert api.requests == []

    @pytest.mark.asyncio
    async def test_missing_key(self, flow, api):
        with pytest.raises(ArgumentValidationError, match="Secret is missing the 'key' field."):
            await recognize_language(flow, text_args(secret={"apiKey": "x"}), transport=api.transport)

    @pytest.mark.asyncio
    async def test_access_denied_recorded(self, flow, api):
        api.respond(401, json={"error": {"code": "401", "message": "Access denied due to invalid subscription key."}})

        await recognize_language(flow, text_args(writeToContext=True), transport=api.transport)

        assert flow.get_full_context()["analysis"] == {
            "error": "Access denied due to invalid subscription key."
        }


class TestTextTranslator:
    """Tests for textTranslator."""

    @pytest.mark.asyncio
    async def test_request_shape(self, flow, api):
        api.respond(200, json=[{"translations": [{"text": "Hallo Welt", "to": "de"}]}])

        await text_translator(flow, text_args(language="de", writeToContext=True), transport=api.transport)

        request = api.last_request
        assert request.url.host == "api.cognitive.microsofttranslator.com"
        assert request.url.path == "/translate"
        assert request.url.params["api-version"] == "3.0"
        assert request.url.params["to"] == "de"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["X-ClientTraceId"]
        assert json.loads(request.content) == [{"text": "Hello world"}]
        assert flow.get_full_context()["analysis"][0]["translations"][0]["text"] == "Hallo Welt"

    @pytest.mark.asyncio
    async def test_trace_id_is_unique_per_call(self, flow, api):
        await text_translator(flow, text_args(language="de"), transport=api.transport)
        await text_translator(flow, text_args(language="de"), transport=api.transport)

        first, second = api.requests
        assert first.headers["X-ClientTraceId"] != second.headers["X-ClientTraceId"]


class TestBingSearch:
    """Tests for the Bing search connectors."""

    @pytest.mark.asyncio
    async def test_web_search(self, flow, api):
        api.respond(200, json={"webPages": {"value": []}})

        await bing_web_search(flow, search_args(query="cognigy"), transport=api.transport)

        request = api.last_request
        assert str(request.url) == "https://api.cognitive.microsoft.com/bing/v7.0/search?q=cognigy"
        assert flow.input["results"] == {"webPages": {"value": []}}
        assert flow.get_full_context() == {}

    @pytest.mark.asyncio
    async def test_news_search(self, flow, api):
        await bing_news_search(flow, search_args(term="weather"), transport=api.transport)

        assert api.last_request.url.path == "/bing/v7.0/news/search"
        assert api.last_request.url.params["q"] == "weather"

    @pytest.mark.asyncio
    async def test_image_search(self, flow, api):
        await bing_image_search(flow, search_args(term="cats"), transport=api.transport)

        assert api.last_request.url.path == "/bing/v7.0/images/search"

    @pytest.mark.asyncio
    async def test_missing_terms(self, flow, api):
        with pytest.raises(ArgumentValidationError, match="No query defined."):
            await bing_web_search(flow, search_args(), transport=api.transport)
        with pytest.raises(ArgumentValidationError, match="No news term defined."):
            await bing_news_search(flow, search_args(), transport=api.transport)
        with pytest.raises(ArgumentValidationError, match="No image term defined."):
            await bing_image_search(flow, search_args(), transport=api.transport)

    @pytest.mark.asyncio
    async def test_bing_error_response_recorded(self, flow, api):
        api.respond(401, json={
            "_type": "ErrorResponse",
            "errors": [{
                "code": "InvalidAuthorization",
                "subCode": "AuthorizationMissing",
                "message": "Access denied due to invalid subscription key.",
            }],
        })

        await bing_web_search(flow, search_args(query="cognigy"), transport=api.transport)

        assert flow.input["results"] == {"error": "Access denied due to invalid subscription key."}
        assert flow.logs == []

    @pytest.mark.asyncio
    async def test_search_error_recorded_in_input(self, flow, api):
        api.respond(403, json={"error": {"code": "403", "message": "Out of call volume quota."}})

        await bing_news_search(flow, search_args(term="weather"), transport=api.transport)

        assert flow.input["results"] == {"error": "Out of call volume quota."}

    @pytest.mark.asyncio
    async def test_search_error_aborts(self, flow, api):
        api.fail("timed out")

        with pytest.raises(ConnectorCallError, match="timed out"):
            await bing_image_search(flow, search_args(term="cats", stopOnError=True), transport=api.transport)

        assert "results" not in flow.input
