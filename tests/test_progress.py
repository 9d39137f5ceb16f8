"""Tests for the enrichment progress bar"""

from unittest.mock import Mock, patch

import pytest

from catbreeds.core.progress import PROGRESS_THEME, EnrichmentProgressBar


@pytest.fixture
def console():
    with patch("catbreeds.core.progress.get_console") as get_console, \
            patch("catbreeds.core.progress.Progress"):
        get_console.return_value = Mock()
        yield get_console.return_value


class TestEnrichmentProgressBar:
    """Theme handling and counters"""

    def test_unstarted_bar_leaves_console_theme_alone(self, console):
        bar = EnrichmentProgressBar(total=4)
        bar.stop()

        console.push_theme.assert_not_called()
        console.pop_theme.assert_not_called()

    def test_theme_pushed_and_popped_once(self, console):
        with EnrichmentProgressBar(total=4) as bar:
            bar.start()
            console.push_theme.assert_called_once_with(PROGRESS_THEME)

        console.pop_theme.assert_called_once()

    def test_update_counts_resolved_and_missing(self, console):
        bar = EnrichmentProgressBar(total=3)

        bar.update(resolved=True)
        bar.update(resolved=False)
        bar.update(resolved=True)

        assert (bar.completed, bar.resolved, bar.missing) == (3, 2, 1)
