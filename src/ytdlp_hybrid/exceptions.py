"""Custom exception hierarchy for ytdlp-hybrid.

All exceptions that cross layer boundaries must inherit from
:class:`HybridExtractorError`.  Raw third-party exceptions (ytmusicapi,
requests, OS and JSON errors) must NEVER propagate beyond the
infrastructure layer; they are caught and re-raised as a typed
subclass defined here.

Hierarchy
---------
HybridExtractorError
├── InvalidURLError
├── BackendTimeoutError
├── NotFoundError
├── PrivateOrUnavailableError
├── InvalidResultError
├── ExtractorError
├── InvalidMixIdError
├── MixUnavailableError
├── SelectionCancelledError
├── MetadataBackendError
│   └── BackendUnavailableError
└── ConfigurationError
    └── BinaryNotFoundError
"""

from __future__ import annotations


class HybridExtractorError(Exception):
    """Base exception for all ytdlp-hybrid errors.

    Every failure surfaced to a caller maps to a subclass of this
    exception so that hosts and the CLI error boundary can render a
    clean message without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Input -------------------------------------------------------------------

class InvalidURLError(HybridExtractorError):
    """Raised when a direct URL fails validation or carries no usable ID."""


# --- Upstream outcomes -------------------------------------------------------

class BackendTimeoutError(HybridExtractorError):
    """Raised when a backend call or extractor run exceeds its time budget."""


class NotFoundError(HybridExtractorError):
    """Raised when the requested video or playlist does not exist."""


class PrivateOrUnavailableError(HybridExtractorError):
    """Raised when content exists but is private or needs authentication."""


class InvalidResultError(HybridExtractorError):
    """Raised when a backend answers with malformed or absent output."""


# --- External extractor ------------------------------------------------------

class ExtractorError(HybridExtractorError):
    """Raised when the yt-dlp process fails without usable output.

    Carries the tool's own diagnostic text so callers can surface it.
    """

    def __init__(
        self,
        message: str,
        *,
        stderr: str = "",
        returncode: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.stderr: str = stderr
        self.returncode: int | None = returncode


# --- Mixes -------------------------------------------------------------------

class InvalidMixIdError(HybridExtractorError):
    """Raised when a mix playlist ID does not carry an 11-character seed."""


class MixUnavailableError(HybridExtractorError):
    """Raised when the seed video of a mix cannot be fetched."""


# --- Metadata backend --------------------------------------------------------

class MetadataBackendError(HybridExtractorError):
    """Raised for metadata-backend failures without a more specific class."""


class BackendUnavailableError(MetadataBackendError):
    """Raised when no backend session could be established."""


# --- Configuration -----------------------------------------------------------

class ConfigurationError(HybridExtractorError):
    """Raised when options or the runtime environment are unusable."""


class BinaryNotFoundError(ConfigurationError):
    """Raised when the yt-dlp executable cannot be located."""


# --- Command line ------------------------------------------------------------

class SelectionCancelledError(HybridExtractorError):
    """Raised when the user dismisses an interactive prompt."""


def append_ytdlp_upgrade_suggestion(hint: str) -> str:
    """Append yt-dlp upgrade guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "Also try updating yt-dlp:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    pip install --upgrade yt-dlp",
        )
    )
