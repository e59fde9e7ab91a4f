"""Tests for partner response classification."""

import pytest

from ewbi.federation.outcome import Outcome, classify, is_deletion_confirmed


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize("status", [200, 201, 202, 204])
    def test_2xx_is_success(self, status: int) -> None:
        """Every 2xx status is a success."""
        assert classify(status) is Outcome.SUCCESS

    def test_400_is_permanent(self) -> None:
        """Bad request will not succeed on retry."""
        assert classify(400, "invalid appId") is Outcome.PERMANENT_REJECTION

    @pytest.mark.parametrize(
        "detail", ["artefact not found", "application not found", "file not found"]
    )
    def test_500_not_found_sentinels_are_permanent(self, detail: str) -> None:
        """A 500 carrying a missing-reference detail is a permanent rejection."""
        assert classify(500, detail) is Outcome.PERMANENT_REJECTION

    def test_500_with_other_detail_is_unclassified(self) -> None:
        """Any other 500 is unclassified."""
        assert classify(500, "database unavailable") is Outcome.UNCLASSIFIED
        assert classify(500) is Outcome.UNCLASSIFIED

    @pytest.mark.parametrize("status", [401, 404, 409, 422, 503, 520])
    def test_transient_statuses(self, status: int) -> None:
        """Conflicts, missing objects and unavailability are transient."""
        assert classify(status) is Outcome.TRANSIENT_PROBLEM

    @pytest.mark.parametrize("status", [301, 403, 418, 502])
    def test_other_statuses_are_unclassified(self, status: int) -> None:
        """Statuses outside the known sets are unclassified."""
        assert classify(status) is Outcome.UNCLASSIFIED


class TestDeletionConfirmed:
    """Tests for is_deletion_confirmed()."""

    def test_success_and_not_found_confirm(self) -> None:
        """2xx and 404 both mean the remote object is gone."""
        assert is_deletion_confirmed(200)
        assert is_deletion_confirmed(204)
        assert is_deletion_confirmed(404)

    def test_other_statuses_do_not_confirm(self) -> None:
        """Anything else keeps the finalizer."""
        assert not is_deletion_confirmed(409)
        assert not is_deletion_confirmed(500)
        assert not is_deletion_confirmed(503)
