"""
Tests for questionnaire-driven stock recommendations.
"""

import os
import sys

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from stockcal.db.seed import DEFAULT_STOCKS
from stockcal.domain.recommendations import (
    ALL_SECTORS,
    QuestionnaireData,
    Stock,
    generate_recommendations,
    match_quality,
    score_percentage,
)


@pytest.fixture
def catalog():
    return [Stock(ticker=t, name=n, type=ty, sector=s) for t, n, ty, s in DEFAULT_STOCKS]


def questionnaire(**overrides) -> QuestionnaireData:
    data = {
        "sectors": ["Technology"],
        "investmentTimeline": "1",
        "checkFrequency": "daily",
        "riskTolerance": "5",
        "portfolioStrategy": "celebrity",
    }
    data.update(overrides)
    return QuestionnaireData(**data)


class TestScoring:
    """Rule scoring against the default catalog"""

    def test_aggressive_tech_day_trader(self, catalog):
        ranked = generate_recommendations(questionnaire(), catalog)

        top = ranked[0]
        assert top.ticker == "NVDA"
        assert top.score == 100
        assert top.match_quality == "Excellent Match"
        assert top.reasons == [
            "Matches your interest in Technology",
            "High growth potential for aggressive investors",
            "High volatility suitable for short-term trading",
            "Popular among investors and influencers",
        ]

    def test_ties_keep_catalog_order(self, catalog):
        ranked = generate_recommendations(questionnaire(), catalog)
        assert [r.ticker for r in ranked[:3]] == ["NVDA", "AMD", "META"]
        assert [r.score for r in ranked[:3]] == [100, 100, 85]

    def test_conservative_long_term_healthcare(self, catalog):
        prefs = questionnaire(
            sectors=["Healthcare"], riskTolerance="1", investmentTimeline="5", portfolioStrategy="diy"
        )
        ranked = {r.ticker: r for r in generate_recommendations(prefs, catalog)}

        assert ranked["JNJ"].score == 95
        assert ranked["PFE"].score == 75
        assert ranked["JNJ"].match_quality == "Excellent Match"

    def test_moderate_risk_medium_timeline(self, catalog):
        prefs = questionnaire(sectors=["Financial Services"], riskTolerance="3", investmentTimeline="3",
                              portfolioStrategy="mix")
        ranked = {r.ticker: r for r in generate_recommendations(prefs, catalog)}

        # sector 40 + moderate 30 + medium timeline 10 + mix sector bonus 5
        assert ranked["BAC"].score == 85
        # sector 40 + conservative under moderate risk 20 + 10 + 5
        assert ranked["JPM"].score == 75

    def test_all_sectors_gives_partial_credit(self, catalog):
        prefs = questionnaire(sectors=[ALL_SECTORS], riskTolerance="1", investmentTimeline="5",
                              portfolioStrategy="diy")
        ranked = generate_recommendations(prefs, catalog)

        assert all("Matches your broad sector interest" in r.reasons for r in ranked)
        assert len(ranked) == 12


class TestRankingProperties:
    """Bounds, ordering and determinism"""

    @pytest.mark.parametrize("risk", ["1", "3", "5"])
    @pytest.mark.parametrize("timeline", ["1", "3", "5"])
    @pytest.mark.parametrize("strategy", ["celebrity", "diy", "mix"])
    def test_scores_bounded_and_sorted(self, catalog, risk, timeline, strategy):
        prefs = questionnaire(riskTolerance=risk, investmentTimeline=timeline, portfolioStrategy=strategy)
        ranked = generate_recommendations(prefs, catalog)

        assert len(ranked) <= 12
        assert all(1 <= r.score <= 100 for r in ranked)
        scores = [r.score for r in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_deterministic(self, catalog):
        prefs = questionnaire()
        first = generate_recommendations(prefs, catalog)
        second = generate_recommendations(prefs, catalog)
        assert [(r.ticker, r.score, r.reasons) for r in first] == [(r.ticker, r.score, r.reasons) for r in second]

    def test_zero_scores_dropped(self, catalog):
        ranked = generate_recommendations(questionnaire(), catalog)
        assert "SPY" not in [r.ticker for r in ranked]

    def test_short_list_not_padded_with_zero_scores(self):
        catalog = [
            Stock(ticker="NVDA", name="NVIDIA Corporation", sector="Technology"),
            Stock(ticker="XOM", name="Exxon Mobil Corporation", sector="Energy"),
            Stock(ticker="KO", name="The Coca-Cola Company", sector="Consumer Goods"),
        ]
        ranked = generate_recommendations(questionnaire(), catalog)
        assert [r.ticker for r in ranked] == ["NVDA"]

    def test_duplicate_ticker_first_wins(self):
        catalog = [
            Stock(ticker="NVDA", name="NVIDIA Corporation", sector="Technology"),
            Stock(ticker="NVDA", name="Duplicate", sector="Energy"),
        ]
        ranked = generate_recommendations(questionnaire(), catalog)
        assert len(ranked) == 1
        assert ranked[0].name == "NVIDIA Corporation"

    def test_max_results_respected(self, catalog):
        ranked = generate_recommendations(questionnaire(), catalog, max_results=5, min_results=3)
        assert len(ranked) == 5


class TestMatchQuality:
    @pytest.mark.parametrize(
        "score,label",
        [(100, "Excellent Match"), (80, "Excellent Match"), (79, "Good Match"), (60, "Good Match"),
         (45, "Moderate Match"), (39, "Basic Match"), (5, "Basic Match")],
    )
    def test_thresholds(self, score, label):
        assert match_quality(score) == label

    def test_percentage(self):
        assert score_percentage(85) == 85


class TestQuestionnaireValidation:
    def test_accepts_snake_case_names(self):
        prefs = QuestionnaireData(
            sectors=["Energy"],
            investment_timeline="4",
            check_frequency="weekly",
            risk_tolerance="2",
            portfolio_strategy="diy",
        )
        assert prefs.risk_tolerance == "2"

    def test_integer_ordinal_coerced(self):
        assert questionnaire(riskTolerance=4).risk_tolerance == "4"

    def test_out_of_range_risk_rejected(self):
        with pytest.raises(ValidationError):
            questionnaire(riskTolerance="6")

    def test_too_many_sectors_rejected(self):
        with pytest.raises(ValidationError):
            questionnaire(sectors=["Technology", "Energy", "Healthcare", "Automotive"])

    def test_all_sectors_is_exclusive(self):
        with pytest.raises(ValidationError):
            questionnaire(sectors=[ALL_SECTORS, "Technology"])

    def test_empty_sectors_rejected(self):
        with pytest.raises(ValidationError):
            questionnaire(sectors=[])

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValidationError):
            questionnaire(portfolioStrategy="yolo")

    def test_unknown_check_frequency_rejected(self):
        with pytest.raises(ValidationError):
            questionnaire(checkFrequency="hourly")
