"""
Unit tests for the scoring engine: sub-scores, weighting, penalties,
badges and query filtering.
"""

import math

import pytest

from app.domain.models.reco import RecommendationContext, RecommendationFactor
from app.domain.services.constants import FACTOR_CATEGORY, FACTOR_POPULARITY, FACTOR_PRICE, FACTOR_TAG
from app.domain.services.recommendation_svc import (
    apply_query_filter,
    category_affinity_score,
    determine_badge_type,
    popularity_score,
    price_range_fit_score,
    recency_boost_score,
    score_all_products,
    tag_affinity_score,
)
from conftest import make_catalog, make_product, make_profile


def _by_id(scored):
    return {sp.product.id: sp for sp in scored}


# =============================================================================
# Sub-scores
# =============================================================================

def test_empty_profile_scores_neutral():
    p = make_product("p1", popularity_score=50, rating=4.0, tags=["a"])
    cat = make_catalog(p)
    [sp] = score_all_products(make_profile(), RecommendationContext(), cat)

    # 50 (neutral price fit) * 0.25 + (50 * 0.8 + 4 * 4) * 0.15
    assert sp.score == pytest.approx(12.5 + 56 * 0.15)
    assert [f.name for f in sp.factors] == [
        "Category Affinity", "Price Range Fit", "Tag Affinity", "Popularity", "Recency Boost",
    ]


def test_out_of_stock_products_are_not_scored(catalog):
    ids = {sp.product.id for sp in score_all_products(make_profile(), RecommendationContext(), catalog)}
    assert "elec-008" not in ids
    assert len(ids) == len([p for p in catalog.get_all_products() if p.in_stock])


def test_category_affinity_includes_related_categories():
    cat = make_catalog()
    lamp = make_product("lamp", category="home")
    profile = make_profile(category_affinity={"home": 0.5, "electronics": 0.5})
    # direct 0.5 + 0.4 * 0.5 from electronics (home -> electronics)
    assert category_affinity_score(lamp, profile, cat) == pytest.approx(70)

    book = make_product("book", category="books")
    assert category_affinity_score(book, profile, cat) == 0


def test_category_affinity_is_capped():
    cat = make_catalog()
    lamp = make_product("lamp", category="home")
    profile = make_profile(category_affinity={"home": 1.0, "electronics": 1.0})
    assert category_affinity_score(lamp, profile, cat) == 100


def test_category_affinity_is_monotonic():
    cat = make_catalog()
    book = make_product("book", category="books")
    scores = [
        category_affinity_score(book, make_profile(category_affinity={"books": a}), cat)
        for a in (0.1, 0.2, 0.5, 0.9)
    ]
    assert scores == sorted(scores)
    assert len(set(scores)) == len(scores)


def test_price_fit_without_history_is_neutral():
    assert price_range_fit_score(make_product("p", price=123), make_profile()) == 50


def test_price_fit_peaks_at_average_and_decays():
    profile = make_profile(price_range={"min": 1000, "max": 3000, "average": 2000})
    assert price_range_fit_score(make_product("p", price=2000), profile) == pytest.approx(100)
    # one full range away: 100 * e^-2
    assert price_range_fit_score(make_product("p", price=4000), profile) == pytest.approx(100 * math.exp(-2))


def test_price_fit_zero_range_uses_unit_spread():
    profile = make_profile(price_range={"min": 2000, "max": 2000, "average": 2000})
    assert price_range_fit_score(make_product("p", price=2001), profile) == pytest.approx(100 * math.exp(-2))


def test_tag_affinity_is_mean_over_product_tags():
    profile = make_profile(tag_affinity={"a": 0.8, "b": 0.4})
    assert tag_affinity_score(make_product("p", tags=["a", "b", "c"]), profile) == pytest.approx(40)
    assert tag_affinity_score(make_product("p", tags=[]), profile) == 0


def test_popularity_ignores_profile():
    assert popularity_score(make_product("p", popularity_score=90, rating=5)) == pytest.approx(92)


def test_recency_boost_category_and_tags():
    seen = make_product("seen", category="electronics", tags=["x", "y", "z"])
    cat = make_catalog(seen)
    profile = make_profile(viewed_product_ids=["seen"])

    same_cat_two_tags = make_product("c1", category="electronics", tags=["x", "y"])
    assert recency_boost_score(same_cat_two_tags, profile, cat) == 90

    other_cat_three_tags = make_product("c2", category="books", tags=["x", "y", "z"])
    assert recency_boost_score(other_cat_three_tags, profile, cat) == 40

    same_cat_all_tags = make_product("c3", category="electronics", tags=["x", "y", "z"])
    assert recency_boost_score(same_cat_all_tags, profile, cat) == 100


def test_recency_only_looks_at_last_three_views():
    old = make_product("old", category="books")
    recent = [make_product(f"r{i}", category="electronics") for i in range(3)]
    cat = make_catalog(old, *recent)
    profile = make_profile(viewed_product_ids=["old", "r0", "r1", "r2"])
    assert recency_boost_score(make_product("b", category="books"), profile, cat) == 0


# =============================================================================
# Totals & penalties
# =============================================================================

def test_factor_weights_are_contributions_to_total():
    p = make_product("p1", category="electronics", tags=["a"], price=2000)
    cat = make_catalog(p)
    profile = make_profile(
        category_affinity={"electronics": 1.0},
        tag_affinity={"a": 0.5},
        price_range={"min": 1000, "max": 3000, "average": 2000},
    )
    [sp] = score_all_products(profile, RecommendationContext(), cat)
    assert sum(f.weight for f in sp.factors) * 100 == pytest.approx(sp.score)
    weights = {f.name: f.weight for f in sp.factors}
    assert weights["Category Affinity"] == pytest.approx(0.30)
    assert weights["Price Range Fit"] == pytest.approx(0.25)
    assert weights["Tag Affinity"] == pytest.approx(0.10)


def test_penalties_stack_and_floor_at_zero():
    a = make_product("a", popularity_score=100, rating=5)
    b = make_product("b", popularity_score=100, rating=5)
    cat = make_catalog(a, b)
    profile = make_profile(viewed_product_ids=["a"])

    plain = _by_id(score_all_products(profile, RecommendationContext(), cat))
    penalized = _by_id(score_all_products(
        profile,
        RecommendationContext(current_product_id="a", cart_product_ids=["a", "b"]),
        cat,
    ))

    assert penalized["a"].score == max(0, plain["a"].score - 30 - 50 - 20)
    assert penalized["a"].score == 0
    assert penalized["b"].score == pytest.approx(plain["b"].score - 30)


def test_last_viewed_penalty_alone():
    a = make_product("a")
    cat = make_catalog(a)
    fresh = score_all_products(make_profile(), RecommendationContext(), cat)[0].score
    seen = score_all_products(make_profile(viewed_product_ids=["a"]), RecommendationContext(), cat)[0].score
    # recency adds 60 * 0.1 for the shared category, the penalty takes 20 off
    assert seen == pytest.approx(fresh + 6 - 20)


# =============================================================================
# Badges
# =============================================================================

def _factors(top: str):
    names = [FACTOR_CATEGORY, FACTOR_PRICE, FACTOR_TAG, FACTOR_POPULARITY]
    return [RecommendationFactor(name=n, weight=0.2 if n == top else 0.05, detail="") for n in names]


def test_high_score_is_best_match_regardless_of_factors():
    b = determine_badge_type(make_product("p"), 85, _factors(FACTOR_POPULARITY))
    assert (b.badge_text, b.badge_type) == ("Best for You", "best-match")


def test_discounted_price_fit_is_great_value():
    p = make_product("p", price=800, original_price=1000)
    b = determine_badge_type(p, 70, _factors(FACTOR_PRICE))
    assert (b.badge_text, b.badge_type) == ("Great Value", "value")


def test_price_fit_without_discount_is_new_for_you():
    b = determine_badge_type(make_product("p"), 70, _factors(FACTOR_PRICE))
    assert b.badge_type == "new-for-you"


@pytest.mark.parametrize(
    "top, text, kind",
    [
        (FACTOR_POPULARITY, "Trending", "trending"),
        (FACTOR_TAG, "Similar to Viewed", "complement"),
        (FACTOR_CATEGORY, "Best for You", "best-match"),
    ],
)
def test_badge_follows_top_factor(top, text, kind):
    b = determine_badge_type(make_product("p"), 40, _factors(top))
    assert (b.badge_text, b.badge_type) == (text, kind)


def test_no_factors_is_new_for_you():
    b = determine_badge_type(make_product("p"), 10, [])
    assert (b.badge_text, b.badge_type) == ("New for You", "new-for-you")


# =============================================================================
# Query filter
# =============================================================================

def test_query_filter_matches_any_term(catalog):
    scored = score_all_products(make_profile(), RecommendationContext(), catalog)
    ids = {sp.product.id for sp in apply_query_filter(scored, "wireless mouse")}
    assert "elec-005" in ids            # Wireless Gaming Mouse
    assert "elec-002" in ids            # "wireless" alone is enough
    assert "book-001" not in ids


def test_query_filter_ignores_short_terms(catalog):
    scored = score_all_products(make_profile(), RecommendationContext(), catalog)
    assert apply_query_filter(scored, "a of") == []


def test_query_filter_is_case_insensitive_substring_over_tags_and_category(catalog):
    scored = score_all_products(make_profile(), RecommendationContext(), catalog)
    assert {sp.product.id for sp in apply_query_filter(scored, "YOGA")} == {"sprt-001", "sprt-002"}
    beauty = {sp.product.id for sp in apply_query_filter(scored, "beau")}
    assert beauty == {"btty-001", "btty-002", "btty-003"}
