"""Exception hierarchy for template-scanner.

All exceptions inherit from TemplateScannerError (single catch point).
Adapters wrap library errors (httpx, redis, subprocess) into these so the
pipeline and the queue only ever see one family of failures.
"""

from __future__ import annotations


class TemplateScannerError(Exception):
    """Base exception for all template-scanner errors."""


class ConfigError(TemplateScannerError):
    """Required configuration is missing or malformed."""


class StoreError(TemplateScannerError):
    """Error reading from or writing to the template store."""


class QueueError(TemplateScannerError):
    """Error talking to the job broker."""


class HostError(TemplateScannerError):
    """Error calling the source-hosting provider API."""


class HostRateLimitError(HostError):
    """The source-hosting provider refused the call because of rate limiting."""


class AnalysisError(TemplateScannerError):
    """A clone directory could not be analyzed."""


class CloneError(TemplateScannerError):
    """Shallow clone failed or timed out."""
