"""Ranking of evaluated financing scenarios."""
from __future__ import annotations

from typing import List, Optional, Sequence

from .models import ScenarioResult


def best_result_index(results: Sequence[ScenarioResult]) -> Optional[int]:
    """Index of the lowest total project cost; the earliest one wins a tie."""
    best_index: Optional[int] = None
    for index, result in enumerate(results):
        if best_index is None or result.total_project_cost < results[best_index].total_project_cost:
            best_index = index
    return best_index


def select_best_result(results: Sequence[ScenarioResult]) -> Optional[ScenarioResult]:
    index = best_result_index(results)
    return None if index is None else results[index]


def rank_results(results: Sequence[ScenarioResult]) -> List[ScenarioResult]:
    """Results ordered by total project cost, keeping list order between equals."""
    return sorted(results, key=lambda result: result.total_project_cost)


__all__ = ["best_result_index", "rank_results", "select_best_result"]
