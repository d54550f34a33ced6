import pytest

from app.domain.models.reco import RecommendationFactor
from app.domain.services.confidence_svc import calculate_confidence, get_confidence_label
from conftest import make_profile


def _factors(*weights):
    return [RecommendationFactor(name=f"f{i}", weight=w, detail="") for i, w in enumerate(weights)]


def _rich_profile(**kw):
    return make_profile(
        viewed_product_ids=["a"],
        viewed_categories={"electronics": 2, "home": 1},
        tag_affinity={"x": 0.1, "y": 0.1, "z": 0.1},
        search_queries=["lamp"],
        price_range={"min": 100, "max": 300, "average": 200},
        **kw,
    )


def test_empty_profile_without_factors_is_zero():
    assert calculate_confidence(make_profile()) == 0.0


def test_interaction_base_is_log_scaled_and_capped():
    assert calculate_confidence(make_profile(interaction_count=7)) == pytest.approx(0.3)
    assert calculate_confidence(make_profile(interaction_count=10_000)) == pytest.approx(0.4)


def test_each_completeness_signal_is_worth_six_hundredths():
    assert calculate_confidence(make_profile(search_queries=["x"])) == pytest.approx(0.06)
    assert calculate_confidence(_rich_profile()) == pytest.approx(0.3)


def test_one_distinct_category_is_not_enough():
    p = make_profile(viewed_categories={"electronics": 5})
    assert calculate_confidence(p) == 0.0


def test_factor_agreement_uses_variance_around_max():
    # weights 0.3, 0, 0: squared gaps to the max are 0, .09, .09 -> variance .06
    assert calculate_confidence(make_profile(), _factors(0.3, 0.0, 0.0)) == pytest.approx(0.24)
    # identical weights sit exactly on the max
    assert calculate_confidence(make_profile(), _factors(0.1, 0.1, 0.1)) == pytest.approx(0.3)


def test_empty_factor_list_behaves_like_none():
    p = _rich_profile(interaction_count=3)
    assert calculate_confidence(p, []) == calculate_confidence(p)


def test_confidence_is_capped_at_one():
    p = _rich_profile(interaction_count=10_000)
    assert calculate_confidence(p, _factors(0.2)) == pytest.approx(1.0)
    assert calculate_confidence(p, _factors(0.2)) <= 1.0


@pytest.mark.parametrize(
    "value, label",
    [
        (0.0, "I'm still learning your preferences"),
        (0.29, "I'm still learning your preferences"),
        (0.3, "Based on what I've seen so far"),
        (0.6, "I'm fairly confident you'll like this"),
        (0.8, "This is a strong match for you"),
        (1.0, "This is a strong match for you"),
    ],
)
def test_confidence_labels(value, label):
    assert get_confidence_label(value) == label
