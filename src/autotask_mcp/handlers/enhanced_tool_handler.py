"""Tool handler that adds company and resource names to results."""

import logging
from typing import Any

from autotask_mcp.api_helpers.autotask_client import AutotaskClient
from autotask_mcp.config import Settings, get_settings
from autotask_mcp.mapping import (
    CacheDomain,
    MappingResolver,
    ResultEnricher,
    get_mapping_resolver,
)

from .tool_handler import ToolHandler

logger = logging.getLogger(__name__)

COMPANY_WRITE_TOOLS = frozenset({"create_company", "update_company"})


class EnhancedToolHandler(ToolHandler):
    """``ToolHandler`` whose success envelopes carry ``_enhanced`` names.

    Args:
        client: Autotask client used by the tools and, on first use, by the
            process-wide resolver.
        resolver: Optional resolver override; defaults to
            ``get_mapping_resolver(client)`` acquired lazily.
        settings: Settings override; defaults to ``get_settings()``.
    """

    def __init__(
        self,
        client: AutotaskClient,
        resolver: MappingResolver | None = None,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(client)
        self.settings = settings or get_settings()
        self._resolver = resolver

    @property
    def resolver(self) -> MappingResolver:
        if self._resolver is None:
            self._resolver = get_mapping_resolver(self.client, self.settings)
        return self._resolver

    async def execute(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        envelope = await super().execute(name, arguments)

        if name in COMPANY_WRITE_TOOLS:
            self._remember_company(name, arguments or {}, envelope.get("data"))

        return await ResultEnricher(self.resolver).enrich(envelope)

    def _remember_company(
        self, name: str, arguments: dict[str, Any], item_id: Any
    ) -> None:
        company_name = arguments.get("companyName")
        company_id = arguments.get("id") if name == "update_company" else item_id
        if not company_name or not isinstance(company_id, int):
            return
        self.resolver.remember(CacheDomain.COMPANY, company_id, company_name)
        logger.debug("Recorded company %s as %r", company_id, company_name)
