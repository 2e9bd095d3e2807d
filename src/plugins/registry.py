"""Language plugin registry and input routing.

A document is routed to a language plugin when it carries a raw ``ast`` tree and
no pre-extracted ``signatures``; everything else goes through the legacy
canonical decoder.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from contract.errors import InputError
from contract.wire import decode_analysis_input

if TYPE_CHECKING:
    from contract.models import AnalysisInput, Language

logger = logging.getLogger(__name__)


class LanguagePlugin(Protocol):
    language: Language

    def can_handle(self, document: dict[str, Any]) -> bool: ...

    def parse_raw_tree(self, document: dict[str, Any]) -> AnalysisInput: ...

    def source_file(self, document: dict[str, Any]) -> str: ...


class PluginRegistry:
    """Ordered collection of language plugins; the first match wins."""

    def __init__(self) -> None:
        self._plugins: list[LanguagePlugin] = []

    def register(self, plugin: LanguagePlugin) -> None:
        self._plugins.append(plugin)

    def find(self, document: dict[str, Any]) -> LanguagePlugin | None:
        for plugin in self._plugins:
            if plugin.can_handle(document):
                return plugin
        return None

    @property
    def plugins(self) -> list[LanguagePlugin]:
        return list(self._plugins)


def default_registry() -> PluginRegistry:
    from plugins.python.plugin import PythonPlugin

    registry = PluginRegistry()
    registry.register(PythonPlugin())
    return registry


def is_raw_format(document: dict[str, Any]) -> bool:
    return "ast" in document and "signatures" not in document


def parse_input(
    document: dict[str, Any], registry: PluginRegistry | None = None
) -> AnalysisInput:
    """Turn a loaded document into an AnalysisInput.

    Raises:
        InputError: If no plugin accepts a raw tree document, or the document is
            malformed for the path it was routed to.
    """
    if not is_raw_format(document):
        logger.debug("Decoding pre-extracted document")
        return decode_analysis_input(document)

    registry = registry or default_registry()
    plugin = registry.find(document)
    if plugin is None:
        msg = "No plugin found for raw AST format"
        raise InputError(msg)

    logger.debug(
        "Routing %s to %s plugin",
        plugin.source_file(document),
        plugin.language.value,
    )
    return plugin.parse_raw_tree(document)


__all__ = [
    "LanguagePlugin",
    "PluginRegistry",
    "default_registry",
    "is_raw_format",
    "parse_input",
]
