from __future__ import annotations

from unittest.mock import Mock, patch

from statement_enricher.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True

    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    def test_init_with_tty_enabled(self):
        with patch("statement_enricher.services.progress.is_tty_enabled", return_value=True), \
             patch("statement_enricher.services.progress.tqdm") as mock_tqdm:

            tracker = ProgressTracker(5, description="Test rows")

            assert tracker.total_rows == 5
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=5,
                desc="Test rows",
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch("statement_enricher.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker(5)

            assert tracker.enabled is False
            assert tracker.pbar is None
            assert tracker.description == "Enriching descriptions"

    def test_advance_updates_bar_and_failure_postfix(self):
        mock_pbar = Mock()
        with patch("statement_enricher.services.progress.is_tty_enabled", return_value=True), \
             patch("statement_enricher.services.progress.tqdm", return_value=mock_pbar):

            tracker = ProgressTracker(3)
            tracker.advance(success=True)
            mock_pbar.set_postfix.assert_not_called()
            tracker.advance(success=False)

            assert tracker.completed == 2
            assert tracker.failed == 1
            assert mock_pbar.update.call_count == 2
            mock_pbar.set_postfix.assert_called_once_with(failed=1)

    def test_advance_counts_without_tty(self):
        with patch("statement_enricher.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker(2)
            tracker.advance()
            tracker.advance(success=False)
            assert (tracker.completed, tracker.failed) == (2, 1)

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()
        with patch("statement_enricher.services.progress.is_tty_enabled", return_value=True), \
             patch("statement_enricher.services.progress.tqdm", return_value=mock_pbar):

            with ProgressTracker(1) as tracker:
                tracker.advance()

            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None
