"""
Azure Cognitive Services Connector Module

This module provides connectors for the Azure Cognitive Services text APIs
(spell check, language detection, key phrases, named entities, translation)
and for Bing web, news and image search.

Every call authenticates with the secret's ``key`` in the
Ocp-Apim-Subscription-Key header and stores the parsed JSON response as is.
Text connectors write to the full context when ``writeToContext`` is set and
to the input otherwise; search connectors always write to the input.
"""

import uuid
from typing import Any, Dict, List, Optional

import httpx

from flow_connectors.connectors.rest_adapter import (
    ArgumentSpec,
    ArgumentType,
    RestRequest,
    StoreTarget,
    perform_rest_call,
    register_connector,
    secret_argument,
    stop_on_error_argument,
    store_argument,
)
from flow_connectors.memory.flow_context import FlowContext

MODULE = "ms-cognitive-services"
SECRET_FIELDS = ("key",)
SUBSCRIPTION_HEADER = "Ocp-Apim-Subscription-Key"

BING_BASE = "https://api.cognitive.microsoft.com/bing/v7.0"
# Text Analytics must be called in the region the access key was issued for
TEXT_ANALYTICS_BASE = "https://westus.api.cognitive.microsoft.com/text/analytics"
TRANSLATOR_URL = "https://api.cognitive.microsofttranslator.com/translate"
TRANSLATOR_API_VERSION = "3.0"

SPELL_CHECK_MARKETS = [
    "ar", "zh-CN", "zh-HK", "zh-TW", "da", "nl-BE", "nl-NL", "en-AU", "en-CA", "en-IN",
    "en-ID", "en-MY", "en-NZ", "en-PH", "en-ZA", "en-GB", "en-US", "fi", "fr-BE", "fr-CA",
    "fr-FR", "fr-CH", "de-AT", "de-DE", "de-CH", "it", "ja", "ko", "no", "pl", "pt-BR",
    "pt-PT", "ru", "es-AR", "es-CL", "es-MX", "es-ES", "es-US", "sv", "tr",
]
TEXT_ANALYTICS_LANGUAGES = ["en", "es", "de"]
TRANSLATOR_LANGUAGES = [
    "af", "ar", "bn", "bs", "bg", "yue", "ca", "zh-Hans", "zh-Hant", "hr", "cs", "da", "nl",
    "en", "et", "fj", "fil", "fi", "fr", "de", "el", "ht", "he", "hi", "mww", "hu", "is", "id",
    "it", "ja", "sw", "tlh", "tlh-Qaak", "ko", "lv", "lt", "mg", "ms", "mt", "nb", "fa", "pl",
    "pt", "otq", "ro", "ru", "sm", "sr-Cyrl", "sr-Latn", "sk", "sl", "es", "sv", "ty", "ta",
    "te", "th", "to", "tr", "uk", "ur", "vi", "cy", "yau",
]

TEXT_REQUIRED = {"text": "No text defined."}
LANGUAGE_TEXT_REQUIRED = {**TEXT_REQUIRED, "language": "No language defined."}


def _headers(secret: Dict[str, Any]) -> Dict[str, str]:
    return {SUBSCRIPTION_HEADER: secret["key"]}

def _text_target(args: Dict[str, Any]) -> StoreTarget:
    return StoreTarget.FULL_CONTEXT if args.get("writeToContext") else StoreTarget.INPUT

def _text_arguments(language_choices: Optional[List[str]] = None) -> List[ArgumentSpec]:
    arguments = [secret_argument()]
    if language_choices:
        arguments.append(ArgumentSpec(name="language", type=ArgumentType.SELECT, required=True,
                                      choices=language_choices, description="The text's language"))
    arguments += [
        ArgumentSpec(name="text", type=ArgumentType.STRING, required=True, description="The text to check"),
        ArgumentSpec(name="writeToContext", type=ArgumentType.BOOLEAN,
                     description="Whether to write to the context (true) or the input (false)"),
        store_argument(),
        stop_on_error_argument(),
    ]
    return arguments

def _search_arguments(query_name: str, description: str) -> List[ArgumentSpec]:
    return [
        secret_argument(),
        ArgumentSpec(name=query_name, type=ArgumentType.STRING, required=True, description=description),
        store_argument(),
        stop_on_error_argument(),
    ]

async def _text_call(flow, args, transport, connector, build, required=TEXT_REQUIRED):
    return await perform_rest_call(
        flow,
        args,
        connector=connector,
        required=required,
        secret_fields=SECRET_FIELDS,
        build_request=build,
        target=_text_target(args),
        transport=transport,
    )

def _analytics_request(path: str, document: Dict[str, Any], secret: Dict[str, Any]) -> RestRequest:
    return RestRequest(
        method="POST",
        url=f"{TEXT_ANALYTICS_BASE}/{path}",
        headers=_headers(secret),
        body={"documents": [document]},
    )


# Text connectors

@register_connector(MODULE, "spellCheck", "Finds spelling mistakes and predicts the correct word",
                    _text_arguments(SPELL_CHECK_MARKETS))
async def spell_check(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        return RestRequest(
            method="POST",
            url=f"{BING_BASE}/spellcheck",
            params={"mkt": call_args["language"], "mode": "proof"},
            headers=_headers(secret),
            data={"text": call_args["text"]},
        )

    return await _text_call(flow, args, transport, "spellCheck", build, LANGUAGE_TEXT_REQUIRED)


@register_connector(MODULE, "recognizeLanguage", "Recognizes the language of the given sentence",
                    _text_arguments())
async def recognize_language(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        return _analytics_request("v2.0/languages", {"id": "1", "text": call_args["text"]}, secret)

    return await _text_call(flow, args, transport, "recognizeLanguage", build)


@register_connector(MODULE, "extractKeyphrases", "Extracts key phrases from a given sentence",
                    _text_arguments(TEXT_ANALYTICS_LANGUAGES))
async def extract_keyphrases(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        document = {"id": "1", "language": call_args["language"], "text": call_args["text"]}
        return _analytics_request("v2.0/keyPhrases", document, secret)

    return await _text_call(flow, args, transport, "extractKeyphrases", build, LANGUAGE_TEXT_REQUIRED)


@register_connector(MODULE, "namedEntityRecognition", "Finds entities in a given sentence",
                    _text_arguments(TEXT_ANALYTICS_LANGUAGES))
async def named_entity_recognition(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        document = {"id": "1", "language": call_args["language"], "text": call_args["text"]}
        return _analytics_request("v2.1-preview/entities", document, secret)

    return await _text_call(flow, args, transport, "namedEntityRecognition", build, LANGUAGE_TEXT_REQUIRED)


@register_connector(MODULE, "textTranslator", "Translates a given text into a chosen language",
                    _text_arguments(TRANSLATOR_LANGUAGES))
async def text_translator(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    def build(call_args, secret):
        return RestRequest(
            method="POST",
            url=TRANSLATOR_URL,
            params={"api-version": TRANSLATOR_API_VERSION, "to": call_args["language"]},
            headers={
                **_headers(secret),
                "Content-Type": "application/json",
                "X-ClientTraceId": str(uuid.uuid4()),
            },
            body=[{"text": call_args["text"]}],
        )

    return await _text_call(flow, args, transport, "textTranslator", build, LANGUAGE_TEXT_REQUIRED)


# Bing search connectors

def _search_request(path: str, query: str, secret: Dict[str, Any]) -> RestRequest:
    return RestRequest(method="GET", url=f"{BING_BASE}/{path}", params={"q": query}, headers=_headers(secret))

async def _search(flow, args, transport, connector, path, query_name, missing_message):
    return await perform_rest_call(
        flow,
        args,
        connector=connector,
        required={query_name: missing_message},
        secret_fields=SECRET_FIELDS,
        build_request=lambda call_args, secret: _search_request(path, call_args[query_name], secret),
        target=StoreTarget.INPUT,
        transport=transport,
    )


@register_connector(MODULE, "bingWebSearch", "Searches the Bing web search engine; the result is stored in the input",
                    _search_arguments("query", "The text to search for"))
async def bing_web_search(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _search(flow, args, transport, "bingWebSearch", "search", "query", "No query defined.")


@register_connector(MODULE, "bingNewsSearch", "Searches the Bing news search engine; the result is stored in the input",
                    _search_arguments("term", "The text to search in the news"))
async def bing_news_search(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _search(flow, args, transport, "bingNewsSearch", "news/search", "term", "No news term defined.")


@register_connector(MODULE, "bingImageSearch", "Searches the Bing image search engine; the result is stored in the input",
                    _search_arguments("term", "The text to search images for"))
async def bing_image_search(
    flow: FlowContext, args: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    return await _search(flow, args, transport, "bingImageSearch", "images/search", "term", "No image term defined.")
