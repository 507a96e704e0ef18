"""
Categorical aggregation for emotion labels.

PURPOSE: Frequency counts, ranked top-K and positive share for free-text labels.
AI CONTEXT: Pure functions. Labels are an open set built from observed data.

LABEL HANDLING:
- Display: labels are kept exactly as observed ("Feliz" and "feliz" are
  two distinct bars)
- Classification: label.strip().lower() is compared against the positive set
- Ranking ties: broken by first-seen order in the source list

USAGE:
    dist = distribution(emotion_rows)
    top = top_k(dist, 5)
    share = positive_share(emotion_rows, Config.get_positive_emotions())
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from .errors import InvalidArgument
from .models import CategoryDistribution, get_field

__all__ = [
    "distribution",
    "top_k",
    "most_common",
    "is_positive",
    "positive_share",
    "distribution_by_group",
]


def distribution(events: Iterable[Any], field: str = "emotion") -> CategoryDistribution:
    """
    Count events per label in first-seen order.

    Events whose label is missing or blank are skipped; they carry no
    category to chart.

    Args:
        events: Row dicts or models carrying `field`.
        field: Name of the categorical field.

    Returns:
        CategoryDistribution with insertion order = first appearance.

    Example:
        >>> distribution([{'emotion': 'feliz'}, {'emotion': 'alerta'}, {'emotion': 'feliz'}]).counts
        {'feliz': 2, 'alerta': 1}
    """
    counts: dict[str, int] = {}
    for event in events:
        label = get_field(event, field)
        if not isinstance(label, str) or not label.strip():
            continue
        counts[label] = counts.get(label, 0) + 1
    return CategoryDistribution(counts=counts)


def top_k(dist: CategoryDistribution, k: int) -> list[tuple[str, int]]:
    """
    Rank labels by count, descending, keeping at most k.

    sorted() is stable and the distribution iterates in first-seen order,
    so equal counts keep their first-seen order.

    Args:
        dist: Distribution to rank.
        k: Maximum number of labels to return.

    Returns:
        List of (label, count) pairs.

    Raises:
        InvalidArgument: If k < 0.

    Example:
        >>> top_k(CategoryDistribution({'triste': 1, 'feliz': 2, 'alerta': 1}), 2)
        [('feliz', 2), ('triste', 1)]
    """
    if k < 0:
        raise InvalidArgument(f"k must be >= 0, got {k}")
    ranked = sorted(dist.counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:k]


def most_common(dist: CategoryDistribution, default: str) -> str:
    """
    Label with the highest count; earliest label wins ties.

    Args:
        dist: Distribution to inspect.
        default: Value returned for an empty distribution.

    Returns:
        Most common label or default.
    """
    ranked = top_k(dist, 1)
    return ranked[0][0] if ranked else default


def is_positive(label: Any, positive_set: Iterable[str]) -> bool:
    """
    Check whether a label belongs to the positive set, ignoring case and padding.

    Example:
        >>> is_positive(' Feliz ', {'feliz'})
        True
    """
    if not isinstance(label, str):
        return False
    return label.strip().lower() in {p.strip().lower() for p in positive_set}


def positive_share(
    events: Iterable[Any],
    positive_set: Iterable[str],
    field: str = "emotion",
) -> float:
    """
    Percentage of events whose label is in the positive set.

    Computed as round(matching / total * 100, 1). Every event counts toward
    the total, including events with a missing label, which can never
    match.

    Business context: The "positive emotions" card is a quick wellbeing
    signal for a fleet. An empty period shows 0%, not an error.

    Args:
        events: Row dicts or models carrying `field`.
        positive_set: Labels considered favorable (any casing).
        field: Name of the categorical field.

    Returns:
        Percentage in [0.0, 100.0] with one decimal; 0.0 for no events.

    Example:
        >>> rows = [{'emotion': e} for e in ['feliz', 'alerta', 'feliz', 'triste']]
        >>> positive_share(rows, {'feliz', 'alerta', 'calmado'})
        75.0
    """
    normalized = {p.strip().lower() for p in positive_set}
    total = 0
    matching = 0
    for event in events:
        total += 1
        if is_positive(get_field(event, field), normalized):
            matching += 1
    if total == 0:
        return 0.0
    return round(matching / total * 100, 1)


def distribution_by_group(
    events: Iterable[Any],
    group_of: Callable[[Any], str | None],
    field: str = "emotion",
) -> dict[str, CategoryDistribution]:
    """
    Per-group label distributions, groups in first-seen order.

    Used for the "emotions per driver" chart: group_of maps an event to its
    driver name. Events whose group resolves to None are skipped, and groups without
    any labelled event are left out.

    Args:
        events: Row dicts or models carrying `field`.
        group_of: Function returning the group key for an event.
        field: Name of the categorical field.

    Returns:
        Mapping group -> CategoryDistribution.

    Example:
        >>> rows = [{'emotion': 'feliz', 'd': 'Ana'}, {'emotion': 'triste', 'd': 'Luis'}]
        >>> {k: v.counts for k, v in distribution_by_group(rows, lambda r: r['d']).items()}
        {'Ana': {'feliz': 1}, 'Luis': {'triste': 1}}
    """
    grouped: dict[str, list[Any]] = {}
    for event in events:
        group = group_of(event)
        if group is None:
            continue
        grouped.setdefault(group, []).append(event)
    result = {group: distribution(members, field) for group, members in grouped.items()}
    return {group: dist for group, dist in result.items() if dist.counts}
