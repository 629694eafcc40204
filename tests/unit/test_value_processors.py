"""Tests for the create-path value processors."""

from __future__ import annotations

import logging

import pytest

from propkit.models import DbInsertData, PropertyDefinition
from propkit.value_processors import (
    MINERS_PROCESSOR,
    MULTI_SELECT_PROCESSOR,
    RICH_TEXT_PROCESSOR,
    SELECT_PROCESSOR,
    TEXT_PROCESSOR,
    USER_PROCESSOR,
)


def _single(data: DbInsertData | None) -> str | None:
    assert data is not None
    assert data.single_values is not None
    assert len(data.single_values) == 1
    return data.single_values[0].value


class TestText:
    def test_valid_value_round_trip(self, text_def: PropertyDefinition) -> None:
        data, result = TEXT_PROCESSOR.process(text_def, "ABC-123", "issue-1")
        assert result.valid
        assert data is not None
        assert data.single_values is not None
        record = data.single_values[0]
        assert (record.issue_id, record.property_id, record.property_type) == ("issue-1", text_def.id, "text")
        assert record.value == "ABC-123"
        assert data.multi_values is None

    def test_none_rejected_when_not_nullable(self, title_def: PropertyDefinition) -> None:
        result = TEXT_PROCESSOR.validate_format(title_def, None)
        assert not result.valid
        assert result.errors == ("Property Title cannot be empty",)

    def test_none_accepted_when_nullable(self, text_def: PropertyDefinition) -> None:
        data, result = TEXT_PROCESSOR.process(text_def, None, "issue-1")
        assert result.valid
        assert _single(data) is None

    def test_containers_rejected(self, text_def: PropertyDefinition) -> None:
        assert not TEXT_PROCESSOR.validate_format(text_def, ["a"]).valid

    def test_numbers_are_coerced(self, text_def: PropertyDefinition) -> None:
        data, result = TEXT_PROCESSOR.process(text_def, 12345.0, "issue-1")
        assert result.valid
        assert _single(data) == "12345"

    def test_length_rules_in_order(self, text_def: PropertyDefinition) -> None:
        short = TEXT_PROCESSOR.validate_business_rules(text_def, "ab")
        assert short.errors == ("Property Serial must be at least 3 characters",)
        long = TEXT_PROCESSOR.validate_business_rules(text_def, "x" * 11)
        assert long.errors == ("Property Serial must be at most 10 characters",)

    def test_pattern_uses_search(self) -> None:
        d = PropertyDefinition("p", "Code", "text", {"pattern": "[0-9]+"})
        assert TEXT_PROCESSOR.validate_business_rules(d, "abc123def").valid
        assert not TEXT_PROCESSOR.validate_business_rules(d, "abc").valid

    def test_pattern_error_message_override(self) -> None:
        d = PropertyDefinition("p", "Code", "text", {"pattern": "^[A-Z]+$", "patternErrorMessage": "Use capitals"})
        assert TEXT_PROCESSOR.validate_business_rules(d, "abc").errors == ("Use capitals",)

    def test_invalid_pattern_is_skipped_and_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        d = PropertyDefinition("p", "Code", "text", {"pattern": "(unclosed"})
        with caplog.at_level(logging.WARNING, logger="propkit.value_processors"):
            assert TEXT_PROCESSOR.validate_business_rules(d, "anything").valid
        assert "Ignoring invalid pattern" in caplog.text


class TestRichText:
    def test_max_length(self, rich_text_def: PropertyDefinition) -> None:
        assert RICH_TEXT_PROCESSOR.validate_business_rules(rich_text_def, "x" * 50).valid
        assert not RICH_TEXT_PROCESSOR.validate_business_rules(rich_text_def, "x" * 51).valid

    def test_nullable_contract(self) -> None:
        required = PropertyDefinition("p", "Notes", "rich_text", nullable=False)
        assert not RICH_TEXT_PROCESSOR.validate_format(required, None).valid

    def test_stored_as_rich_text(self, rich_text_def: PropertyDefinition) -> None:
        data, _ = RICH_TEXT_PROCESSOR.process(rich_text_def, "<p>hi</p>", "i")
        assert data is not None
        assert data.single_values is not None
        assert data.single_values[0].property_type == "rich_text"


class TestSelect:
    def test_valid_option(self, select_def: PropertyDefinition) -> None:
        data, result = SELECT_PROCESSOR.process(select_def, "open", "i")
        assert result.valid
        assert _single(data) == "open"

    def test_unknown_option(self, select_def: PropertyDefinition) -> None:
        result = SELECT_PROCESSOR.validate_business_rules(select_def, "deleted")
        assert result.errors == ("Property Status value is not a valid option",)

    @pytest.mark.parametrize("unset", [None, ""])
    def test_unset_stores_null(self, select_def: PropertyDefinition, unset: object) -> None:
        data, result = SELECT_PROCESSOR.process(select_def, unset, "i")
        assert result.valid
        assert _single(data) is None

    def test_misconfigured_without_options(self) -> None:
        d = PropertyDefinition("p", "Broken", "select")
        result = SELECT_PROCESSOR.validate_business_rules(d, "open")
        assert result.errors == ("Property Broken is misconfigured: no options defined",)

    def test_numeric_option_ids(self) -> None:
        d = PropertyDefinition("p", "Level", "select", {"options": [{"id": "1"}, {"id": "2"}]})
        data, result = SELECT_PROCESSOR.process(d, 2, "i")
        assert result.valid
        assert _single(data) == "2"

    def test_rejects_lists(self, select_def: PropertyDefinition) -> None:
        assert not SELECT_PROCESSOR.validate_format(select_def, ["open"]).valid


class TestMultiSelect:
    def test_positions_follow_input_order(self, multi_select_def: PropertyDefinition) -> None:
        data, result = MULTI_SELECT_PROCESSOR.process(multi_select_def, ["warranty", "urgent"], "i")
        assert result.valid
        assert data is not None
        assert data.multi_values is not None
        assert [(r.value, r.position) for r in data.multi_values] == [("warranty", 0), ("urgent", 1)]
        assert data.single_values is None

    def test_empty_list_inserts_nothing(self, multi_select_def: PropertyDefinition) -> None:
        data, result = MULTI_SELECT_PROCESSOR.process(multi_select_def, [], "i")
        assert result.valid
        assert data == DbInsertData(multi_values=())

    def test_duplicates_rejected(self, multi_select_def: PropertyDefinition) -> None:
        result = MULTI_SELECT_PROCESSOR.validate_business_rules(multi_select_def, ["urgent", "urgent"])
        assert result.errors == ("Property Labels contains duplicate options",)

    def test_invalid_option_rejected(self, multi_select_def: PropertyDefinition) -> None:
        result = MULTI_SELECT_PROCESSOR.validate_business_rules(multi_select_def, ["urgent", "nope"])
        assert not result.valid
        assert '"nope"' in result.errors[0]

    def test_max_select(self, multi_select_def: PropertyDefinition) -> None:
        result = MULTI_SELECT_PROCESSOR.validate_business_rules(multi_select_def, ["urgent", "recurring", "warranty"])
        assert result.errors == ("Property Labels allows at most 2 options",)

    def test_format_requires_list_of_scalars(self, multi_select_def: PropertyDefinition) -> None:
        assert not MULTI_SELECT_PROCESSOR.validate_format(multi_select_def, "urgent").valid
        result = MULTI_SELECT_PROCESSOR.validate_format(multi_select_def, ["urgent", {"id": "x"}])
        assert result.errors == ("Property Labels: option #2 must be a string or number",)


class TestMaxSelectZero:
    def test_bounds_miners(self) -> None:
        capped = PropertyDefinition("p", "Miners", "miners", {"maxSelect": 0})
        result = MINERS_PROCESSOR.validate_business_rules(capped, ["m-1"])
        assert result.errors == ("Property Miners allows at most 0 miners",)
        assert MINERS_PROCESSOR.validate_business_rules(capped, []).valid

    def test_leaves_multi_select_unbounded(self) -> None:
        options = [{"id": "a"}, {"id": "b"}, {"id": "c"}]
        d = PropertyDefinition("p", "Tags", "multi_select", {"options": options, "maxSelect": 0})
        assert MULTI_SELECT_PROCESSOR.validate_business_rules(d, ["a", "b", "c"]).valid


class TestMiners:
    def test_ids_are_stringified(self, miners_def: PropertyDefinition) -> None:
        data, result = MINERS_PROCESSOR.process(miners_def, [101, "m-2"], "i")
        assert result.valid
        assert data is not None
        assert data.multi_values is not None
        assert [(r.value, r.position, r.property_type) for r in data.multi_values] == [
            ("101", 0, "miners"),
            ("m-2", 1, "miners"),
        ]

    def test_duplicates_rejected(self, miners_def: PropertyDefinition) -> None:
        result = MINERS_PROCESSOR.validate_business_rules(miners_def, ["a", "a"])
        assert result.errors == ("Property Miners contains duplicate miner ids",)

    def test_max_select(self, miners_def: PropertyDefinition) -> None:
        assert not MINERS_PROCESSOR.validate_business_rules(miners_def, ["a", "b", "c", "d"]).valid

    def test_none_inserts_nothing(self, miners_def: PropertyDefinition) -> None:
        data, result = MINERS_PROCESSOR.process(miners_def, None, "i")
        assert result.valid
        assert data == DbInsertData(multi_values=())


class TestUser:
    def test_user_id_stored(self, user_def: PropertyDefinition) -> None:
        data, result = USER_PROCESSOR.process(user_def, "user_2abc", "i")
        assert result.valid
        assert _single(data) == "user_2abc"

    @pytest.mark.parametrize("unset", [None, ""])
    def test_unset_stores_null(self, user_def: PropertyDefinition, unset: object) -> None:
        data, _ = USER_PROCESSOR.process(user_def, unset, "i")
        assert _single(data) is None

    def test_non_string_rejected(self, user_def: PropertyDefinition) -> None:
        assert not USER_PROCESSOR.validate_format(user_def, 42).valid
