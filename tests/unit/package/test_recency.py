import random
import time

from chat_combine.archive.inspector import inspect_archive
from chat_combine.package.recency import PathLengthScorer, PlaceholderRecencyScorer
from chat_combine.testing.export_kit import build_export

SOURCE = inspect_archive(build_export(1, []), "a.zip", source_key="k")


class TestPlaceholderRecencyScorer:
    def test_formula_without_jitter(self):
        scorer = PlaceholderRecencyScorer(clock=lambda: 1_000.0, jitter_ms=0)
        assert scorer.score("photos/a.jpg", SOURCE) == 1_000_000 + 12 * 100

    def test_jitter_stays_in_range(self):
        scorer = PlaceholderRecencyScorer(clock=lambda: 50_000.0)
        for _ in range(50):
            score = scorer.score("a", SOURCE)
            assert 50_000_000 - 10_000_000 < score <= 50_000_000 + 100

    def test_seeded_is_repeatable(self):
        first = PlaceholderRecencyScorer(clock=lambda: 1.0, rng=random.Random(3))
        second = PlaceholderRecencyScorer(clock=lambda: 1.0, rng=random.Random(3))
        paths = ["a.jpg", "photos/b.jpg", "video/c.mp4"]
        assert [first.score(p, SOURCE) for p in paths] == [
            second.score(p, SOURCE) for p in paths
        ]

    def test_from_config_without_jitter(self):
        scorer = PlaceholderRecencyScorer.from_config(
            {"jitter_ms": 0, "path_factor": 0}
        )
        assert abs(scorer.score("abc", SOURCE) - time.time() * 1000) < 5_000

    def test_from_config_path_factor(self):
        scorer = PlaceholderRecencyScorer.from_config(
            {"seed": 1, "jitter_ms": 1, "path_factor": 1_000_000_000}
        )
        gap = scorer.score("abcdef", SOURCE) - scorer.score("abc", SOURCE)
        assert abs(gap - 3_000_000_000) < 5_000


class TestPathLengthScorer:
    def test_same_path_same_score(self):
        scorer = PathLengthScorer()
        other = inspect_archive(build_export(1, []), "b.zip", source_key="k2")
        assert scorer.score("photos/a.jpg", SOURCE) == scorer.score(
            "photos/a.jpg", other
        )

    def test_longer_path_scores_higher(self):
        scorer = PathLengthScorer(path_factor=10)
        assert scorer.score("abcd", SOURCE) == 40
        assert scorer.score("ab", SOURCE) < scorer.score("abcd", SOURCE)
