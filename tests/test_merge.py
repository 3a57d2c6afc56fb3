from datetime import datetime

import pytest

from crest.errors import MergeTypeError
from crest.merge import deep_merge


def test_merge_overlays_keys_recursively():
    base = {"headers": {"a": "1", "b": "2"}, "params": {}}
    override = {"headers": {"b": "3", "c": "4"}, "query": {"q": "x"}}

    assert deep_merge(base, override) == {
        "headers": {"a": "1", "b": "3", "c": "4"},
        "params": {},
        "query": {"q": "x"},
    }


def test_merge_does_not_mutate_inputs():
    base = {"headers": {"a": "1"}}
    override = {"headers": {"b": "2"}}

    merged = deep_merge(base, override)
    merged["headers"]["c"] = "3"

    assert base == {"headers": {"a": "1"}}
    assert override == {"headers": {"b": "2"}}


def test_merge_copies_nested_containers_from_single_layer():
    base = {"headers": {"a": "1"}, "ids": [1, 2]}

    merged = deep_merge(base)

    assert merged == base
    assert merged["headers"] is not base["headers"]
    assert merged["ids"] is not base["ids"]


def test_merge_folds_many_layers_left_to_right():
    layers = [{"h": {"k": 1}}, None, {"h": {"k": 2}}, {}, {"h": {"j": 3}}]

    assert deep_merge(*layers) == {"h": {"k": 2, "j": 3}}


def test_none_override_replaces_value():
    assert deep_merge({"h": {"k": "v"}}, {"h": {"k": None}}) == {"h": {"k": None}}
    assert deep_merge({"h": {"k": "v"}}, {"h": None}) == {"h": None}


def test_callables_short_circuit_merging():
    def producer():
        return "value"

    assert deep_merge({"k": {"nested": 1}}, {"k": producer}) == {"k": producer}
    assert deep_merge({"k": producer}, {"k": {"nested": 1}}) == {
        "k": {"nested": 1}
    }


def test_dates_replace_base_value():
    stamp = datetime(2024, 1, 2, 3, 4, 5)

    assert deep_merge({"since": "yesterday"}, {"since": stamp}) == {
        "since": stamp
    }


def test_parent_placeholder_expands_base_string():
    merged = deep_merge(
        {"headers": {"Accept": "application/json"}},
        {"headers": {"Accept": "#{_}, text/plain"}},
    )

    assert merged == {"headers": {"Accept": "application/json, text/plain"}}


def test_parent_placeholder_allows_spaces_and_keeps_non_string_base():
    assert deep_merge({"k": "a"}, {"k": "#{ _ }b"}) == {"k": "ab"}
    assert deep_merge({"k": 5}, {"k": "#{_}b"}) == {"k": 5}


def test_lists_merge_element_wise_and_drop_none():
    assert deep_merge({"k": [1, 2, 3]}, {"k": [9]}) == {"k": [9, 2, 3]}
    assert deep_merge({"k": [1]}, {"k": [None, 2, 3]}) == {"k": [2, 3]}
    assert deep_merge({"k": [{"a": 1}]}, {"k": [{"b": 2}]}) == {
        "k": [{"a": 1, "b": 2}]
    }


def test_list_with_non_list_fails():
    with pytest.raises(MergeTypeError, match=r"array with a non-array \(k\)"):
        deep_merge({"k": [1]}, {"k": "x"})

    with pytest.raises(TypeError):
        deep_merge({"k": "x"}, {"k": [1]})


def test_mapping_with_non_mapping_fails():
    with pytest.raises(MergeTypeError, match=r"object with a non-object \(k\)"):
        deep_merge({"k": {"a": 1}}, {"k": "x"})

    with pytest.raises(MergeTypeError):
        deep_merge({"k": 1}, {"k": {"a": 1}})
