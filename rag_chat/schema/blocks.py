"""
Typed content blocks of a structured answer.

The model's JSON is untrusted input. These pydantic models are the
"validate" half of the parse-then-validate pipeline in
rag_chat.agents.structured_output: a StructuredAnswer can only be built
from exactly one text, one table and one chart block, in that order,
whose table rows and chart data describe the same dataset.
"""

from __future__ import annotations

from collections import Counter
from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rag_chat.config.constants import STRUCTURED_BLOCK_ORDER


class _Block(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class TextBlock(_Block):
    type: Literal["text"] = "text"
    content: str

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text block content must not be empty")
        return value


class TableColumn(_Block):
    key: str
    label: str


class TableBlock(_Block):
    type: Literal["table"] = "table"
    columns: List[TableColumn] = Field(min_length=1)
    rows: List[Dict[str, Any]] = Field(min_length=1)

    @model_validator(mode="after")
    def _rows_match_columns(self) -> "TableBlock":
        keys = [c.key for c in self.columns]
        if len(set(keys)) != len(keys):
            raise ValueError("table column keys must be unique")
        for i, row in enumerate(self.rows):
            missing = [k for k in keys if k not in row]
            if missing:
                raise ValueError(f"table row {i} is missing columns {missing}")
        return self

    @property
    def column_keys(self) -> List[str]:
        return [c.key for c in self.columns]


class ChartBlock(_Block):
    type: Literal["chart"] = "chart"
    chart_type: Literal["bar", "line", "pie"] = Field(alias="chartType")
    x_key: str = Field(alias="xKey")
    y_key: str = Field(alias="yKey")
    data: List[Dict[str, Any]] = Field(min_length=1)

    @model_validator(mode="after")
    def _points_have_axes(self) -> "ChartBlock":
        for i, point in enumerate(self.data):
            if self.x_key not in point or self.y_key not in point:
                raise ValueError(
                    f"chart point {i} must contain both '{self.x_key}' and '{self.y_key}'"
                )
        return self


ContentBlock = Annotated[Union[TextBlock, TableBlock, ChartBlock], Field(discriminator="type")]


def _comparable(value: Any) -> Any:
    # 5, 5.0 and "5" describe the same data point; bools are kept apart.
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        stripped = value.strip().replace(",", "")
        try:
            return float(stripped)
        except ValueError:
            return value.strip().lower()
    return repr(value)


class StructuredAnswer(BaseModel):
    """A validated {"blocks": [text, table, chart]} payload."""
    model_config = ConfigDict(extra="forbid")

    blocks: List[ContentBlock]

    @model_validator(mode="after")
    def _check_contract(self) -> "StructuredAnswer":
        types = tuple(b.type for b in self.blocks)
        expected = tuple(t.value for t in STRUCTURED_BLOCK_ORDER)
        if types != expected:
            raise ValueError(f"blocks must be exactly {list(expected)}, got {list(types)}")

        table: TableBlock = self.blocks[1]
        chart: ChartBlock = self.blocks[2]

        if len(table.rows) != len(chart.data):
            raise ValueError(
                f"table has {len(table.rows)} rows but chart has {len(chart.data)} points"
            )
        keys = table.column_keys
        for axis in (chart.x_key, chart.y_key):
            if axis not in keys:
                raise ValueError(f"chart key '{axis}' is not a table column")

        table_points = Counter(
            (_comparable(r[chart.x_key]), _comparable(r[chart.y_key])) for r in table.rows
        )
        chart_points = Counter(
            (_comparable(p[chart.x_key]), _comparable(p[chart.y_key])) for p in chart.data
        )
        if table_points != chart_points:
            raise ValueError("table rows and chart data do not describe the same dataset")
        return self

    @property
    def text(self) -> TextBlock:
        return self.blocks[0]

    @property
    def table(self) -> TableBlock:
        return self.blocks[1]

    @property
    def chart(self) -> ChartBlock:
        return self.blocks[2]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
