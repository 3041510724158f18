"""
Scoring and item-set rules for performance reviews.

Pure functions, no database access:
- validate_items: edit-time invariants on a review's full item set
- aggregate_scores: checks a scoring request and computes the total score
- calculate_grade_point: total score -> grade point multiplier
"""
import math
from typing import Dict, Iterable, List, Sequence, Tuple

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationFailedError
from app.models.performance_review import ItemCategory, PerformanceItem
from app.schemas.review import ReviewItemIn, ScoreItemInput

WEIGHT_TOLERANCE = 1e-6


def _reportable(value):
    # nan and inf have no JSON form; error details carry them as text
    if value is None or math.isfinite(value):
        return value
    return str(value)


def calculate_grade_point(total_score: float) -> float:
    """
    Map a total score onto a grade point.

    90-100 -> 1.0, 60-<90 -> 0.8, <60 -> 0.0. Over-achievement above 100
    passes through uncapped as score / 100.
    """
    if total_score > 100:
        return total_score / 100
    if total_score >= 90:
        return 1.0
    if total_score >= 60:
        return 0.8
    return 0.0


def validate_items(items: Sequence[ReviewItemIn]) -> float:
    """
    Check a proposed item set before it replaces the stored one.

    Returns the work-performance weight total. Raises ValidationFailedError
    on the first violated rule.
    """
    required_total = settings.review.work_performance_weight_total
    work_total = 0.0
    for index, item in enumerate(items):
        if not item.title.strip() or not item.description.strip() or not item.target.strip():
            raise ValidationFailedError(
                "All item fields are required: title, description and target must not be empty",
                details={"item_index": index},
            )
        if item.weight is None or not math.isfinite(item.weight) or item.weight <= 0:
            raise ValidationFailedError(
                "Item weight must be greater than 0",
                details={"item_index": index, "weight": _reportable(item.weight)},
            )
        if item.category == ItemCategory.WORK_PERFORMANCE.value:
            work_total += item.weight

    if not math.isclose(work_total, required_total, abs_tol=WEIGHT_TOLERANCE):
        raise ValidationFailedError(
            f"Work-performance item weights must total {required_total:g}%",
            details={"work_performance_weight": work_total},
        )
    return work_total


def aggregate_scores(
    items: Iterable[PerformanceItem],
    inputs: Sequence[ScoreItemInput],
) -> Tuple[float, List[Dict]]:
    """
    Validate a scoring request against the review's items and compute the total.

    Only items present in `inputs` with a score contribute weight/100 * score.
    Nothing is mutated; the caller persists the returned updates.

    Returns:
        (total_score rounded to 2 decimals, list of item update dicts)
    """
    max_score = settings.review.max_item_score
    by_id = {item.id: item for item in items}
    seen = set()
    total = 0.0
    updates: List[Dict] = []

    for entry in inputs:
        item = by_id.get(entry.id)
        if item is None:
            raise NotFoundError("Invalid item ID", details={"item_id": entry.id})
        if entry.id in seen:
            raise ValidationFailedError("Duplicate item ID in score request", details={"item_id": entry.id})
        seen.add(entry.id)

        if entry.score is not None:
            if not math.isfinite(entry.score) or entry.score < 0 or entry.score > max_score:
                raise ValidationFailedError(
                    f"Item score must be between 0 and {max_score:g}",
                    details={"item_id": entry.id, "score": _reportable(entry.score)},
                )
            total += (item.weight / 100.0) * entry.score

        updates.append({
            "id": entry.id,
            "completion_details": entry.completion_details,
            "score": entry.score,
        })

    return round(total, 2), updates
