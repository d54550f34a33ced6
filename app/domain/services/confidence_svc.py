import math
from typing import List, Optional

from app.domain.models.reco import RecommendationFactor
from app.domain.models.session import SessionProfile


def _data_completeness(profile: SessionProfile) -> float:
    signals = sum([
        len(profile.viewed_product_ids) > 0,
        len(profile.viewed_categories) >= 2,
        profile.price_range.average > 0,
        len(profile.tag_affinity) >= 3,
        len(profile.search_queries) > 0,
    ])
    return (signals / 5) * 0.3


def calculate_confidence(profile: SessionProfile, factors: Optional[List[RecommendationFactor]] = None) -> float:
    """
    Confidence in [0, 1] built from three parts:
      - interaction volume: log2(n + 1) / 10, capped at 0.4
      - data completeness: up to 0.3 for five profile signals
      - factor agreement: 0.3 minus the population variance of factor
        weights measured around the strongest one (not the mean)
    """
    interaction_base = min(0.4, math.log2(profile.interaction_count + 1) / 10)
    completeness = _data_completeness(profile)

    weights = [f.weight for f in factors or []]
    if not weights:
        return min(1.0, interaction_base + completeness)

    top = max(weights)
    variance = sum((w - top) ** 2 for w in weights) / len(weights)
    agreement = max(0.0, 0.3 - variance)

    return min(1.0, interaction_base + completeness + agreement)


def get_confidence_label(confidence: float) -> str:
    if confidence < 0.3:
        return "I'm still learning your preferences"
    if confidence < 0.6:
        return "Based on what I've seen so far"
    if confidence < 0.8:
        return "I'm fairly confident you'll like this"
    return "This is a strong match for you"
