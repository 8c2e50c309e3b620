"""Diagram models in the React Flow node/edge shape.

Field names are snake_case in Python and camelCase on the wire; dump
with `to_flow()` to get exactly what the renderer expects.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SourceHandle = Literal["top", "bottom", "left", "right"]
TargetHandle = Literal["top-target", "bottom-target", "left-target", "right-target"]
LayoutDirection = Literal["TB", "LR"]

SelectCallback = Callable[[str | None], None]


class FlowModel(BaseModel):
    """camelCase on the wire, None fields omitted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_flow(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Position(FlowModel):
    x: float = 0.0
    y: float = 0.0


class DiagramColumn(FlowModel):
    name: str
    type: str
    nullable: bool = True
    primary_key: bool | None = None
    foreign_key: str | None = None
    """Referenced "table.column", when resolved."""
    indexed: bool | None = None
    last_used: datetime | None = None


class DiagramTable(FlowModel):
    id: str
    name: str
    columns: list[DiagramColumn] = Field(default_factory=list)
    position: Position = Field(default_factory=Position)
    row_count: int | None = None
    column_count: int | None = None


class TableNodeData(FlowModel):
    table: DiagramTable
    is_selected: bool = False
    on_select: SelectCallback | None = Field(default=None, exclude=True)
    has_ai_issues: bool = Field(default=False, alias="hasAIIssues")
    has_schema_issues: bool = False


class DiagramNode(FlowModel):
    id: str
    type: str = "tableNode"
    position: Position = Field(default_factory=Position)
    data: TableNodeData
    draggable: bool = True


class EdgeStyle(FlowModel):
    stroke: str
    stroke_width: int = 2
    stroke_dasharray: str | None = None


class LabelStyle(FlowModel):
    fill: str
    font_size: int = 11
    font_weight: int = 600
    font_family: str = "monospace"


class LabelBackgroundStyle(FlowModel):
    fill: str
    fill_opacity: float = 0.9


class EdgeMarker(FlowModel):
    type: str = "arrowclosed"
    width: int = 20
    height: int = 20
    color: str


class DiagramEdge(FlowModel):
    id: str
    source: str
    target: str
    source_handle: SourceHandle = "bottom"
    target_handle: TargetHandle = "top-target"
    animated: bool = False
    class_name: str = "transition-all duration-200"
    style: EdgeStyle
    type: str = "smoothstep"
    label: str
    label_style: LabelStyle
    label_bg_style: LabelBackgroundStyle
    label_bg_padding: tuple[int, int] = (6, 10)
    label_bg_border_radius: int = 4
    marker_end: EdgeMarker


class LayoutResult(FlowModel):
    """Positioned nodes, oriented edges, and node centers used to pick handles."""

    nodes: list[DiagramNode] = Field(default_factory=list)
    edges: list[DiagramEdge] = Field(default_factory=list)
    node_positions: dict[str, Position] = Field(default_factory=dict)

    def to_flow(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_flow() for n in self.nodes],
            "edges": [e.to_flow() for e in self.edges],
        }
