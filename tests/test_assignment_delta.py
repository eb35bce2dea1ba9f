"""
Broadcast Operations Issue Tracker
Tests — assignment differ and assignee payload normalisation.
"""

import pytest

from issue_tracker.core.exceptions import ValidationError
from issue_tracker.services.assignment import assignee_delta, normalise_assignees


class TestAssigneeDelta:
    def test_same_set_yields_nothing(self):
        assert assignee_delta([7, 9], [7, 9]) == set()

    def test_first_assignment(self):
        assert assignee_delta([], [4]) == {4}

    def test_unassigning_yields_nothing(self):
        assert assignee_delta([4], []) == set()

    def test_only_new_members(self):
        assert assignee_delta([7, 9], [7, 9, 11]) == {11}

    def test_delta_is_subset_of_new_minus_old(self):
        old, new = [1, 2, 3], [3, 4, 5]
        delta = assignee_delta(old, new)
        assert delta <= set(new) - set(old)
        assert delta == {4, 5}

    def test_new_none_means_field_absent(self):
        assert assignee_delta([1], None) == set()
        assert assignee_delta(None, None) == set()

    def test_single_valued_reassign_same_user(self):
        assert assignee_delta(4, 4) == set()

    def test_single_valued_assign_different_user(self):
        assert assignee_delta(4, 5) == {5}

    def test_single_valued_unassign(self):
        assert assignee_delta(4, "") == set()

    def test_single_valued_from_nobody(self):
        assert assignee_delta(None, 8) == {8}


class TestNormaliseAssignees:
    def test_list_of_ints(self):
        assert normalise_assignees([7, 9]) == [7, 9]

    def test_numeric_strings(self):
        assert normalise_assignees(["7", " 9"]) == [7, 9]

    def test_json_encoded_list_from_form_post(self):
        assert normalise_assignees("[7, 9, 11]") == [7, 9, 11]

    def test_duplicates_collapse_in_order(self):
        assert normalise_assignees([9, 7, 9]) == [9, 7]

    def test_blank_is_empty(self):
        assert normalise_assignees(None) == []
        assert normalise_assignees("") == []

    def test_rejects_non_numeric(self):
        with pytest.raises(ValidationError):
            normalise_assignees(["bob"])

    def test_rejects_malformed_json(self):
        with pytest.raises(ValidationError):
            normalise_assignees("[7, ")

    def test_single_valued(self):
        assert normalise_assignees("12", many=False) == 12
        assert normalise_assignees(None, many=False) is None
        assert normalise_assignees("", many=False) is None

    def test_single_valued_rejects_garbage(self):
        with pytest.raises(ValidationError):
            normalise_assignees("abc", many=False)

    def test_booleans_are_not_user_ids(self):
        with pytest.raises(ValidationError):
            normalise_assignees([True])

    def test_rejects_ids_beyond_64_bits(self):
        with pytest.raises(ValidationError):
            normalise_assignees([2 ** 63])
        with pytest.raises(ValidationError):
            normalise_assignees(str(10 ** 20), many=False)
        assert normalise_assignees([2 ** 63 - 1]) == [2 ** 63 - 1]
