"""Unit tests for the selection tracker."""

from app.services.selection_tracker import SelectionTracker


class TestToggle:
    """Test toggle."""

    def test_toggle_adds_then_removes(self):
        tracker = SelectionTracker()
        assert tracker.toggle("1") is True
        assert "1" in tracker
        assert tracker.toggle("1") is False
        assert tracker.is_empty()

    def test_toggle_is_independent_per_id(self):
        tracker = SelectionTracker()
        tracker.toggle("1")
        tracker.toggle("2")
        tracker.toggle("1")
        assert tracker.selected == frozenset({"2"})


class TestSelectAll:
    """Test select_all toggling behaviour."""

    def test_select_all_selects_every_visible_id(self):
        tracker = SelectionTracker()
        tracker.toggle("1")
        assert tracker.select_all(["1", "2", "3"]) == frozenset({"1", "2", "3"})

    def test_select_all_twice_clears(self):
        """select_all is involutive for an unchanged non-empty visible set."""
        tracker = SelectionTracker()
        visible = ["1", "2"]
        tracker.select_all(visible)
        tracker.select_all(visible)
        assert tracker.is_empty()

    def test_select_all_replaces_partial_selection(self):
        tracker = SelectionTracker()
        tracker.toggle("2")
        tracker.select_all(["1", "2"])
        assert len(tracker) == 2

    def test_all_selected(self):
        tracker = SelectionTracker()
        assert tracker.all_selected([]) is False
        tracker.select_all(["1"])
        assert tracker.all_selected(["1"]) is True
        assert tracker.all_selected(["1", "2"]) is False

    def test_clear_all(self):
        tracker = SelectionTracker()
        tracker.select_all(["1", "2"])
        tracker.clear_all()
        assert tracker.is_empty()


class TestReconcile:
    """Test reconcile keeps the selection within the visible set."""

    def test_reconcile_prunes_hidden_ids(self):
        tracker = SelectionTracker()
        tracker.select_all(["1", "2", "3"])
        pruned = tracker.reconcile(["2", "4"])
        assert pruned == frozenset({"1", "3"})
        assert tracker.selected == frozenset({"2"})

    def test_reconcile_never_adds(self):
        tracker = SelectionTracker()
        tracker.toggle("1")
        tracker.reconcile(["1", "2", "3"])
        assert tracker.selected == frozenset({"1"})

    def test_selection_is_subset_after_any_reconcile_sequence(self):
        tracker = SelectionTracker()
        views = [["1", "2", "3", "4"], ["2", "3"], ["3", "5"], [], ["1", "3", "5"]]
        for step, visible in enumerate(views):
            if step % 2 == 0:
                tracker.select_all(visible)
            tracker.reconcile(visible)
            assert tracker.selected <= set(visible)
