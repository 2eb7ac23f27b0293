"""Template store backed by a PostgREST endpoint (Supabase REST API).

Base URL: ``{SUPABASE_URL}/rest/v1``. Authenticates with the service-role
key in both the ``apikey`` and ``Authorization`` headers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

import httpx

from template_scanner.errors import StoreError
from template_scanner.models import StaleTemplate, TemplateScan

logger = logging.getLogger(__name__)

TABLE = "templates"
URL_COLUMN = "visit_link"


@dataclass
class PostgrestTemplateStore:
    """Async adapter for TemplateStorePort over the PostgREST HTTP API."""

    http: httpx.AsyncClient
    base_url: str
    api_key: str

    @property
    def headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @property
    def table_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/rest/v1/{TABLE}"

    async def fetch_stale(self, *, scanned_before: datetime, limit: int) -> list[StaleTemplate]:
        """Select ``id`` and URL of stale rows, never-scanned rows first.

        Raises:
            StoreError: If the store is unreachable or rejects the query.
        """
        params = {
            "select": f"id,{URL_COLUMN}",
            "or": f"(last_scanned.is.null,last_scanned.lt.{scanned_before.isoformat()})",
            "order": "last_scanned.asc.nullsfirst",
            "limit": str(limit),
        }
        try:
            response = await self.http.get(self.table_url, params=params, headers=self.headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreError(f"Failed to query stale templates: {exc}") from exc

        templates: list[StaleTemplate] = []
        for row in response.json():
            url = row.get(URL_COLUMN)
            if not url:
                logger.warning("Template %s has no %s, skipping", row.get("id"), URL_COLUMN)
                continue
            templates.append(StaleTemplate(id=int(row["id"]), repository_url=str(url)))
        return templates

    async def update_template(self, scan: TemplateScan) -> None:
        """PATCH the row for ``scan.template_id`` with freshly computed columns.

        Raises:
            StoreError: If the update is rejected or the store is unreachable.
        """
        try:
            response = await self.http.patch(
                self.table_url,
                params={"id": f"eq.{scan.template_id}"},
                json=scan.to_row(),
                headers={**self.headers, "Prefer": "return=minimal"},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreError(f"Failed to update template {scan.template_id}: {exc}") from exc
