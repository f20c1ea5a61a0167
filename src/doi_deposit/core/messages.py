"""
Message keys and default formatting for run log entries.

Entries keep their untranslated key and parameters so a hosting
application can localize them; the default formatter only knows English.
"""

from typing import Any, Callable, Dict, Optional


NO_DOI_PREFIX = "plugins.importexport.common.senderTask.warning.noDOIprefix"
DEPOSIT_ERROR = "plugins.importexport.common.register.error.mdsError"
DOCUMENT_ERROR = "plugins.importexport.common.senderTask.error.documentError"
PLUGIN_UNAVAILABLE = "plugins.importexport.common.senderTask.error.pluginUnavailable"
RUN_CANCELLED = "plugins.importexport.common.senderTask.notice.cancelled"

# Placeholder the generic deposit error is logged with
NO_PARAM = " - "

MessageFormatter = Callable[[str, Dict[str, Any]], str]


DEFAULT_CATALOG: Dict[str, str] = {
    NO_DOI_PREFIX: (
        "The journal with the path {path} does not have a DOI prefix configured; "
        "its DOIs were not deposited."
    ),
    DEPOSIT_ERROR: "Registration was not successful! The DOI registration server returned an error: '{param}'.",
    DOCUMENT_ERROR: "The registration document could not be created: '{param}'.",
    PLUGIN_UNAVAILABLE: "The registration plugin is not available; no DOIs were deposited.",
    RUN_CANCELLED: "The run was stopped before all DOIs were deposited.",
}


class CatalogMessageFormatter:
    """
    Formats message keys from a template catalog.

    Unknown keys and templates with missing parameters render as
    ``key (name=value, ...)`` so nothing is lost from the log.
    """

    def __init__(self, catalog: Optional[Dict[str, str]] = None):
        self.catalog = dict(DEFAULT_CATALOG)
        if catalog:
            self.catalog.update(catalog)

    def __call__(self, key: str, params: Dict[str, Any]) -> str:
        template = self.catalog.get(key)
        if template is not None:
            try:
                return template.format(**params)
            except (KeyError, IndexError):
                pass
        return _fallback(key, params)


def _fallback(key: str, params: Dict[str, Any]) -> str:
    if not params:
        return key
    rendered = ", ".join(f"{k}={v}" for k, v in params.items())
    return f"{key} ({rendered})"


default_formatter = CatalogMessageFormatter()
