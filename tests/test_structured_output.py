"""Tests for the parse-then-validate pipeline of structured answers."""

import copy
import json

import pytest

from rag_chat.agents.structured_output import parse_structured_answer
from rag_chat.utils.exceptions import StructuredOutputError
from tests.fakes import VALID_STRUCTURED


def _payload():
    return copy.deepcopy(VALID_STRUCTURED)


def test_valid_payload_is_returned_unchanged():
    answer = parse_structured_answer(json.dumps(VALID_STRUCTURED))

    assert answer.to_payload() == VALID_STRUCTURED
    assert answer.chart.chart_type == "bar"
    assert len(answer.table.rows) == len(answer.chart.data) == 5


@pytest.mark.parametrize(
    "wrap",
    [
        lambda s: f"```json\n{s}\n```",
        lambda s: f"Here is the data you asked for:\n{s}\nLet me know if you need more.",
        lambda s: s.replace("}]}]}", "},]}]}"),
    ],
    ids=["fenced", "surrounding-prose", "trailing-comma"],
)
def test_envelope_noise_is_tolerated(wrap):
    answer = parse_structured_answer(wrap(json.dumps(VALID_STRUCTURED)))

    assert answer.to_payload() == VALID_STRUCTURED


def test_bare_block_list_is_accepted():
    answer = parse_structured_answer(json.dumps(VALID_STRUCTURED["blocks"]))

    assert answer.to_payload() == VALID_STRUCTURED


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "I cannot produce a table for that.",
        '{"blocks": [{"type": "text", "content": "unterminated"',
    ],
)
def test_unreadable_output_fails_at_parse_stage(raw):
    with pytest.raises(StructuredOutputError) as exc_info:
        parse_structured_answer(raw)

    assert exc_info.value.stage == "parse"


def _drop_chart(p):
    p["blocks"].pop()


def _reorder(p):
    p["blocks"] = [p["blocks"][1], p["blocks"][0], p["blocks"][2]]


def _extra_block(p):
    p["blocks"].append({"type": "text", "content": "Anything else?"})


def _fewer_points(p):
    p["blocks"][2]["data"].pop()


def _different_value(p):
    p["blocks"][2]["data"][0]["population"] = 9999


def _unknown_axis(p):
    p["blocks"][2]["yKey"] = "gdp"
    for point in p["blocks"][2]["data"]:
        point["gdp"] = 1


def _row_missing_column(p):
    del p["blocks"][1]["rows"][2]["population"]


def _bad_chart_type(p):
    p["blocks"][2]["chartType"] = "scatter"


def _extra_key(p):
    p["blocks"][0]["style"] = "bold"


def _empty_text(p):
    p["blocks"][0]["content"] = "  "


def _empty_rows(p):
    p["blocks"][1]["rows"] = []
    p["blocks"][2]["data"] = []


@pytest.mark.parametrize(
    "mutate",
    [
        _drop_chart,
        _reorder,
        _extra_block,
        _fewer_points,
        _different_value,
        _unknown_axis,
        _row_missing_column,
        _bad_chart_type,
        _extra_key,
        _empty_text,
        _empty_rows,
    ],
)
def test_contract_violations_fail_at_validate_stage(mutate):
    payload = _payload()
    mutate(payload)

    with pytest.raises(StructuredOutputError) as exc_info:
        parse_structured_answer(json.dumps(payload))

    assert exc_info.value.stage == "validate"


def test_numeric_strings_match_numbers_between_table_and_chart():
    payload = _payload()
    for point in payload["blocks"][2]["data"]:
        point["population"] = str(point["population"])

    answer = parse_structured_answer(json.dumps(payload))

    assert answer.chart.data[0]["population"] == "1428"


def test_json_that_is_not_a_block_list_fails_at_validate_stage():
    with pytest.raises(StructuredOutputError) as exc_info:
        parse_structured_answer("[1, 2]")

    assert exc_info.value.stage == "validate"
