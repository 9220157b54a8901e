"""Tests for stat cards and loading messages."""

from surprise_app.data.models import DEFAULT_STATS, StatsSummary
from surprise_app.views.cards import (
    STATS_LOADING,
    STATS_LOADING_ESCALATED,
    loading_message,
    stat_cards,
)


class TestStatCards:
    """Test the four summary cards."""

    def test_cards_from_stats(self):
        stats = StatsSummary(
            total_releases=120, beat_expectation=58, miss_expectation=47,
            beat_pct=48.3, miss_pct=39.2, avg_surprise="+0.03 pp", years="10 years"
        )

        cards = stat_cards(stats)

        assert [card.label for card in cards] == [
            "Total Releases", "Beat Expectation", "Miss Expectation", "Avg Surprise"
        ]
        assert cards[0].value == "120"
        assert cards[0].sub == "10 years"
        assert cards[1].sub == "48.3%"
        assert cards[1].trend == "up"
        assert cards[2].trend == "down"
        assert cards[3].value == "+0.03 pp"

    def test_missing_stats_use_zero_state(self):
        assert stat_cards(None) == stat_cards(DEFAULT_STATS)
        assert stat_cards(None)[0].value == "0"


class TestLoadingMessage:
    def test_normal_and_escalated(self):
        assert loading_message(False) == STATS_LOADING
        assert loading_message(True) == STATS_LOADING_ESCALATED
        assert loading_message(True).message == "Still loading, almost there..."
