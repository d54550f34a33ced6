"""
End-to-end ranking and cart advice through the request orchestrators.
"""

import pytest

from app.domain.models.cart import CartItem
from app.domain.models.reco import RecommendationContext
from app.domain.models.session import BehaviorEvent
from app.domain.services.confidence_svc import get_confidence_label
from app.domain.services.pipeline_svc import advise_cart, recommend_products
from app.domain.services.session_learner_svc import create_default_profile, track_event
from conftest import make_profile


def _ids(result):
    return [r.product_id for r in result.recommendations]


def _browsed(catalog, *pids):
    profile = create_default_profile()
    for pid in pids:
        profile = track_event(profile, BehaviorEvent(type="view", product_id=pid), catalog)
    return profile


def test_default_limit_and_descending_scores(catalog):
    res = recommend_products(make_profile(), RecommendationContext(), catalog=catalog)
    assert len(res.recommendations) == 6
    scores = [r.score for r in res.recommendations]
    assert scores == sorted(scores, reverse=True)
    assert "elec-008" not in _ids(res)  # out of stock


def test_explicit_limit(catalog):
    res = recommend_products(make_profile(), RecommendationContext(limit=3), catalog=catalog)
    assert len(res.recommendations) == 3


def test_same_input_same_ranking(catalog):
    profile = _browsed(catalog, "elec-001", "elec-005", "home-003")
    a = recommend_products(profile, RecommendationContext(), catalog=catalog)
    b = recommend_products(profile, RecommendationContext(), catalog=catalog)
    assert _ids(a) == _ids(b)


def test_query_narrows_results(catalog):
    res = recommend_products(make_profile(), RecommendationContext(), chat_query="yoga", catalog=catalog)
    assert set(_ids(res)) == {"sprt-001", "sprt-002"}
    assert res.message.startswith("Based on your request, I found 2 great options.")


def test_unmatched_query_falls_back_to_full_ranking(catalog):
    plain = recommend_products(make_profile(), RecommendationContext(), catalog=catalog)
    res = recommend_products(make_profile(), RecommendationContext(), chat_query="zzzz qqqq", catalog=catalog)
    assert _ids(res) == _ids(plain)


def test_cart_items_hidden_outside_cart_page(catalog):
    ctx = dict(cart_product_ids=["book-001"], limit=50)
    home = recommend_products(make_profile(), RecommendationContext(current_page="home", **ctx), catalog=catalog)
    cart = recommend_products(make_profile(), RecommendationContext(current_page="cart", **ctx), catalog=catalog)

    assert "book-001" not in _ids(home)
    assert "book-001" in _ids(cart)
    assert len(cart.recommendations) == len(home.recommendations) + 1


def test_browsing_pulls_category_forward(catalog):
    profile = _browsed(catalog, "sprt-001", "sprt-004", "sprt-003")
    res = recommend_products(profile, RecommendationContext(), catalog=catalog)
    assert _ids(res)[0].startswith("sprt-")
    assert _ids(res)[0] != "sprt-003"  # just viewed


def test_every_recommendation_is_explained(catalog):
    profile = _browsed(catalog, "elec-002", "elec-003")
    res = recommend_products(profile, RecommendationContext(), catalog=catalog)
    for r in res.recommendations:
        assert r.reasoning
        assert 0 <= r.confidence <= 1
        assert len(r.factors) == 5
        assert r.score == round(r.score)
    assert res.confidence_label == get_confidence_label(res.confidence)
    assert res.processing_time_ms >= 0


def test_new_session_gets_starter_message(catalog):
    res = recommend_products(create_default_profile(), RecommendationContext(), catalog=catalog)
    assert res.message.startswith("Here are 6 popular picks to get you started!")
    assert res.session_insight.startswith("I'm just getting started")


# =============================================================================
# Cart advice
# =============================================================================

def test_empty_cart_advice(catalog):
    res = advise_cart([], make_profile(), catalog)
    assert res.optimizations == []
    assert res.summary.startswith("Your cart looks good!")
    assert res.total_potential_saving == 0
    assert res.confidence == 0.3


def test_cart_advice_totals(catalog):
    profile = make_profile(price_range={"min": 1500, "max": 2500, "average": 2000, "sensitivity": "moderate"})
    cart = [CartItem(product_id="elec-001", quantity=2), CartItem(product_id="elec-002")]
    res = advise_cart(cart, profile, catalog)

    assert len(res.optimizations) == 5
    # bundle 300 + alternatives 20500 and 500
    assert res.total_potential_saving == pytest.approx(21300)
    assert res.summary == "I found 5 suggestions that could save you up to ₹21,300!"
    assert res.confidence == pytest.approx(0.66)
    assert "mid-range" in res.price_sensitivity_insight
