"""
scorch-kit — unit tests for config tree rewriting

File: tests/unit/templating/test_rewriter.py

Purpose
- Validate whole-token and substring substitution, purity of the rewrite,
  and layering of resolved replacement maps.
"""

from __future__ import annotations

import copy

import pytest

from scorch_kit.templating import apply_replacements, merge_replacements, render_scalar


def test_empty_replacements_return_the_input_untouched() -> None:
    tree = {"a": ["$X", {"b": "$X"}]}
    assert apply_replacements(tree, {}) is tree


def test_whole_token_keeps_native_type() -> None:
    rendered = apply_replacements({"count": "$COUNT", "flag": "$ON"}, {"$COUNT": 5, "$ON": False})

    assert rendered == {"count": 5, "flag": False}
    assert isinstance(rendered["count"], int)


def test_embedded_tokens_use_text_form() -> None:
    rendered = apply_replacements(
        {"host": "node-$COUNT", "opts": ["enabled=$ON", "rate=$RATE", "none=$NIL"]},
        {"$COUNT": 5, "$ON": True, "$RATE": 0.25, "$NIL": None},
    )
    assert rendered == {
        "host": "node-5",
        "opts": ["enabled=true", "rate=0.25", "none=null"],
    }


def test_nested_trees_are_rewritten_without_mutating_inputs() -> None:
    tree = {
        "nodes": [{"name": "$NAME", "ports": [80, "$PORT"]}],
        "tuple": ("$NAME", 1),
        "$NAME": "keys are not rewritten",
    }
    resolved = {"$NAME": "web", "$PORT": 8080}
    tree_before = copy.deepcopy(tree)
    resolved_before = dict(resolved)

    rendered = apply_replacements(tree, resolved)

    assert rendered == {
        "nodes": [{"name": "web", "ports": [80, 8080]}],
        "tuple": ("web", 1),
        "$NAME": "keys are not rewritten",
    }
    assert tree == tree_before
    assert resolved == resolved_before


def test_keys_are_substituted_in_lexicographic_order() -> None:
    resolved = {"$AB": "y", "$A": "x"}

    assert apply_replacements("$AB", resolved) == "y"
    assert apply_replacements("v-$AB", resolved) == "v-xB"


def test_non_string_scalars_are_left_alone() -> None:
    assert apply_replacements([1, 2.5, True, None], {"1": "one"}) == [1, 2.5, True, None]


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, "true"), (False, "false"), (None, "null"), (0.1, "0.1"), (1e20, "1e+20"), (7, "7")],
)
def test_render_scalar(value: object, expected: str) -> None:
    assert render_scalar(value) == expected  # type: ignore[arg-type]


def test_structured_choices_keep_their_type_only_as_whole_tokens() -> None:
    resolved = {"$NODES": ["a", "b"], "$NONE": None}
    tree = {"nodes": "$NODES", "label": "n=$NODES", "note": "x $NONE"}

    rewritten = apply_replacements(tree, resolved)  # type: ignore[arg-type]

    assert rewritten["nodes"] == ["a", "b"]
    assert rewritten["label"] == "n=['a', 'b']"
    assert rewritten["note"] == "x null"


def test_merge_replacements_override_wins_and_inputs_stay_intact() -> None:
    base = {"a": 1, "b": 2}
    override = {"b": 3, "c": 4}

    merged = merge_replacements(base, override)

    assert merged == {"a": 1, "b": 3, "c": 4}
    assert base == {"a": 1, "b": 2}
    assert override == {"b": 3, "c": 4}
    assert merged is not base
