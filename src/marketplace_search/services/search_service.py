"""SearchService: advertisement search orchestration.

Public methods: ``search(params)``, ``list_owner_advertisements(owner_id,
params)`` and ``explain(params)``. Every entry point goes through the same
normalizer, category resolver, plan selector and executors; MCP tools and
the CLI are thin wrappers.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..domain.category_resolver import CategoryHierarchyResolver
from ..domain.errors import InvalidParameter
from ..domain.normalizer import FilterSpecNormalizer
from ..domain.pagination import paginate
from ..domain.query_plan import JoinedPlan, QueryPlan, QueryPlanSelector
from ..models.responses import SearchResponse
from ..ports.advertisement_store import AdvertisementStorePort
from ..ports.id_gen import RequestIdProvider, UuidRequestIdProvider
from ..ports.reference_store import ReferenceStorePort
from .executors import JoinedPlanExecutor, PlanResult, SimplePlanExecutor
from .projector import ResultProjector


class SearchService:
    """Orchestrates normalize -> resolve -> select -> execute -> project."""

    def __init__(
        self,
        store: AdvertisementStorePort,
        references: ReferenceStorePort,
        normalizer: FilterSpecNormalizer | None = None,
        category_resolver: CategoryHierarchyResolver | None = None,
        plan_selector: QueryPlanSelector | None = None,
        simple_executor: SimplePlanExecutor | None = None,
        joined_executor: JoinedPlanExecutor | None = None,
        projector: ResultProjector | None = None,
        request_id_provider: RequestIdProvider | None = None,
        logger: Any = None,
    ) -> None:
        self._store = store
        self._normalizer = normalizer or FilterSpecNormalizer()
        self._categories = category_resolver or CategoryHierarchyResolver(references, logger=logger)
        self._selector = plan_selector or QueryPlanSelector()
        self._simple = simple_executor or SimplePlanExecutor(store, references)
        self._joined = joined_executor or JoinedPlanExecutor(store)
        self._projector = projector or ResultProjector()
        self._req_id = request_id_provider or UuidRequestIdProvider()
        self._logger = logger

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def search(self, params: Mapping[str, Any]) -> SearchResponse:
        return self._run(params, entry="search", implicit_active_default=True)

    def list_owner_advertisements(
        self,
        owner_id: str,
        params: Mapping[str, Any] | None = None,
    ) -> SearchResponse:
        """An owner's own advertisements, inactive and archived included unless filtered."""
        if not owner_id or not str(owner_id).strip():
            raise InvalidParameter("ownerId", owner_id, "owner id is required")
        merged = dict(params or {})
        merged["ownerId"] = str(owner_id).strip()
        return self._run(merged, entry="owner_listing", implicit_active_default=False)

    def explain(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Normalize and plan without executing; returns the typed plan."""
        spec = self._normalizer.normalize(params)
        category_ids = self._categories.resolve(spec.category_ids, spec.include_subcategories)
        plan = self._selector.select(spec, category_ids)
        return {
            "filters": spec.echo(),
            "plan": plan.kind,
            "reasons": list(plan.reasons),
            "categoryIds": category_ids,
            "detail": plan.model_dump(mode="json"),
        }

    def health(self) -> dict[str, Any]:
        return {"ok": self._store.ping(), "store": type(self._store).__name__}

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run(
        self,
        params: Mapping[str, Any],
        *,
        entry: str,
        implicit_active_default: bool,
    ) -> SearchResponse:
        # 1. Generate request_id (trace_id)
        request_id = self._req_id.new_request_id()
        if self._logger:
            self._logger.info("search_start", extra={"trace_id": request_id, "entry": entry})

        # 2. Normalize; nothing touches the store before this succeeds
        try:
            spec = self._normalizer.normalize(params, implicit_active_default=implicit_active_default)
        except InvalidParameter as e:
            if self._logger:
                self._logger.info(
                    "search_rejected",
                    extra={"trace_id": request_id, "parameter": e.parameter, "reason": e.reason},
                )
            raise

        # 3. Resolve category closure, select plan
        category_ids = self._categories.resolve(spec.category_ids, spec.include_subcategories)
        plan = self._selector.select(spec, category_ids)

        # 4. Execute
        result = self._execute(plan)

        # 5. Project and paginate from the single total
        response = SearchResponse(
            data=[self._projector.project(doc) for doc in result.documents],
            pagination=paginate(plan.page, result.total),
            filters=spec.echo(),
        )
        if self._logger:
            self._logger.info(
                "search_done",
                extra={
                    "trace_id": request_id,
                    "entry": entry,
                    "plan": plan.kind,
                    "total": result.total,
                    "page": spec.page,
                    "returned": len(response.data),
                },
            )
        return response

    def _execute(self, plan: QueryPlan) -> PlanResult:
        if isinstance(plan, JoinedPlan):
            return self._joined.execute(plan)
        return self._simple.execute(plan)
