"""Services: search orchestration, plan executors, projection; engines in domain."""

from ..domain.category_resolver import CategoryHierarchyResolver
from ..domain.normalizer import FilterSpecNormalizer
from ..domain.query_plan import QueryPlanSelector
from .executors import JoinedPlanExecutor, PlanResult, SimplePlanExecutor
from .projector import ResultProjector
from .search_service import SearchService

__all__ = [
    "CategoryHierarchyResolver",
    "FilterSpecNormalizer",
    "JoinedPlanExecutor",
    "PlanResult",
    "QueryPlanSelector",
    "ResultProjector",
    "SearchService",
    "SimplePlanExecutor",
]
