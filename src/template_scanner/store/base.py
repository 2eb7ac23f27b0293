"""Port: Template persistence."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from template_scanner.models import StaleTemplate, TemplateScan


class TemplateStorePort(Protocol):
    """Port for the row store holding the template catalog."""

    async def fetch_stale(self, *, scanned_before: datetime, limit: int) -> list[StaleTemplate]:
        """Return up to ``limit`` templates never scanned or last scanned before ``scanned_before``."""
        ...

    async def update_template(self, scan: TemplateScan) -> None:
        """Replace the scan columns of the row identified by ``scan.template_id``."""
        ...
