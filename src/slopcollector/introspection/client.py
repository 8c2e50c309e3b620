"""HTTP client for a Supabase/PostgREST project.

All failures come back as Result.fail: introspection degrades to
"no data" and never raises past this boundary.
"""

from __future__ import annotations

from typing import Any

import requests

from slopcollector.core.logging import get_logger
from slopcollector.core.models.base import Result

logger = get_logger(__name__)

REST_PATH = "/rest/v1/"


class SupabaseRestClient:
    """Thin wrapper over requests for the PostgREST root and RPC endpoints.

    Args:
        base_url: Project URL, e.g. https://xyz.supabase.co
        api_key: anon or service-role key, sent as apikey and Bearer token
        timeout: Per-request timeout in seconds
        sql_function: RPC function that runs a SQL query and returns rows
        session: Optional requests.Session (for connection reuse or tests)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 15.0,
        sql_function: str = "exec_sql",
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.sql_function = sql_function
        self._session = session or requests.Session()

    @property
    def rest_url(self) -> str:
        return f"{self.base_url}{REST_PATH}"

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/openapi+json, application/json",
        }

    def fetch_openapi(self) -> Result[dict[str, Any]]:
        """GET the OpenAPI root document."""
        try:
            response = self._session.get(
                self.rest_url, headers=self._headers(), timeout=self.timeout
            )
            response.raise_for_status()
            document = response.json()
        except requests.RequestException as e:
            logger.warning("openapi_fetch_failed", url=self.rest_url, error=str(e))
            return Result.fail(f"Failed to fetch OpenAPI document: {e}")
        except ValueError as e:
            logger.warning("openapi_parse_failed", url=self.rest_url, error=str(e))
            return Result.fail(f"OpenAPI document is not valid JSON: {e}")

        if not isinstance(document, dict):
            return Result.fail("OpenAPI document is not a JSON object")
        return Result.ok(document)

    def run_sql(self, query: str) -> Result[list[dict[str, Any]]]:
        """Run a catalog query through the SQL RPC function.

        Needs a privileged key and a function like:
            create function exec_sql(query text) returns setof json ...
        """
        url = f"{self.rest_url}rpc/{self.sql_function}"
        try:
            response = self._session.post(
                url,
                headers={**self._headers(), "Content-Type": "application/json"},
                json={"query": query},
                timeout=self.timeout,
            )
            response.raise_for_status()
            rows = response.json()
        except requests.RequestException as e:
            logger.info("catalog_query_unavailable", function=self.sql_function, error=str(e))
            return Result.fail(f"SQL RPC '{self.sql_function}' unavailable: {e}")
        except ValueError as e:
            return Result.fail(f"SQL RPC returned invalid JSON: {e}")

        if not isinstance(rows, list):
            return Result.fail("SQL RPC did not return a list of rows")
        return Result.ok([row for row in rows if isinstance(row, dict)])

    def close(self) -> None:
        self._session.close()
