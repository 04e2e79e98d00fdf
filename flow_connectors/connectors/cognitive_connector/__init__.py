"""
Azure Cognitive Services Connector Package

Text analytics, spell check and translation connectors, plus Bing search.
"""

from flow_connectors.connectors.cognitive_connector.cognitive_client import (
    bing_image_search,
    bing_news_search,
    bing_web_search,
    extract_keyphrases,
    named_entity_recognition,
    recognize_language,
    spell_check,
    text_translator,
)

__all__ = [
    "bing_image_search",
    "bing_news_search",
    "bing_web_search",
    "extract_keyphrases",
    "named_entity_recognition",
    "recognize_language",
    "spell_check",
    "text_translator",
]
