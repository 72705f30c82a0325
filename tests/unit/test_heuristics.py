"""Tests for the heuristic price finder."""

from bs4 import BeautifulSoup

from price_engine.heuristics import collect_candidates, find_price, select_price
from price_engine.models import PriceCandidate


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _candidate(price: float, bucket: str = "normal") -> PriceCandidate:
    return PriceCandidate(price=price, source_text=str(price), priority_bucket=bucket)


class TestSelectPrice:
    """Selection policy over collected candidates."""

    def test_high_priority_candidate_wins(self) -> None:
        assert select_price([_candidate(999), _candidate(100, "high")]) == 100

    def test_first_high_priority_candidate_in_order_wins(self) -> None:
        candidates = [_candidate(300, "high"), _candidate(200, "high")]
        assert select_price(candidates) == 300

    def test_most_frequent_value_wins_without_high_candidates(self) -> None:
        candidates = [_candidate(50), _candidate(80), _candidate(50)]
        assert select_price(candidates) == 50

    def test_maximum_is_the_last_resort(self) -> None:
        assert select_price([_candidate(50), _candidate(80)]) == 80

    def test_empty_candidates(self) -> None:
        assert select_price([]) is None


class TestFindPrice:
    """Full-document sweeps."""

    def test_targeted_sweep_uses_price_classes(self) -> None:
        document = _soup(
            "<html><body>"
            "<div>Sepette 99,90 TL indirim</div>"
            '<span class="price">1.299,90 TL</span>'
            "</body></html>"
        )

        candidates = collect_candidates(document)

        assert [c.priority_bucket for c in candidates] == ["high"]
        assert find_price(document) == 1299.90

    def test_targeted_sweep_returns_first_in_document_order(self) -> None:
        document = _soup(
            '<div class="amount">250,00</div><div class="price">300,00</div>'
        )
        assert find_price(document) == 250.0

    def test_blocklisted_promotions_are_ignored(self) -> None:
        document = _soup(
            "<html><body>"
            '<span class="price">Ücretsiz kargo 500 TL üzeri</span>'
            "</body></html>"
        )
        assert find_price(document) is None

    def test_exhaustive_sweep_runs_when_no_price_class_matches(self) -> None:
        document = _soup("<html><body><div><p>Sadece 249,90 TL</p></div></body></html>")

        candidates = collect_candidates(document)

        assert candidates
        assert {c.priority_bucket for c in candidates} == {"normal"}
        assert find_price(document) == 249.90

    def test_exhaustive_sweep_skips_scripts(self) -> None:
        document = _soup(
            "<html><head><script>var price = '1.999,00 TL';</script></head>"
            "<body><p>Stokta yok</p></body></html>"
        )
        assert find_price(document) is None

    def test_long_text_is_skipped(self) -> None:
        document = _soup(f'<p class="price">{"lorem ipsum " * 20} 450,00 TL</p>')
        assert collect_candidates(document) == []

    def test_out_of_range_values_are_dropped(self) -> None:
        document = _soup('<span class="price">0,50 TL</span>')
        assert collect_candidates(document) == []

    def test_candidate_records_css_context(self) -> None:
        document = _soup('<span class="price sale">75,00 TL</span>')

        [candidate] = collect_candidates(document)

        assert candidate.css_context == "price sale"
        assert candidate.price == 75.0
