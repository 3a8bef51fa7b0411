from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# DISPLAY CONFIGURATION
# =============================================================================

class DiagramConfig(BaseModel):
    """
    Display switches for one diagram. Generators send camelCase keys
    (``showMeasurements``); snake_case names work too. Family specific
    switches that have no dedicated field are kept as extras and read through
    ``option()``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    width: Optional[float] = Field(None, description="Canvas width override in pixels")
    height: Optional[float] = Field(None, description="Canvas height override in pixels")
    size: str = Field("medium", description="Size tier: small, medium or large")
    theme: str = Field("educational", description="Theme registry key")
    show_measurements: bool = Field(False, alias="showMeasurements")
    show_labels: bool = Field(False, alias="showLabels")
    show_grid: Optional[bool] = Field(None, alias="showGrid", description="None lets the family decide")
    center: bool = True
    uniform_scale: bool = Field(True, alias="uniformScale",
                                description="False lets axis-aligned figures stretch x and y separately")
    show_3d_perspective: bool = Field(True, alias="show3DPerspective")
    show_net_diagram: bool = Field(False, alias="showNetDiagram")
    show_angle_marks: bool = Field(False, alias="showAngleMarks")
    show_correspondence: bool = Field(False, alias="showCorrespondence")
    coordinate_mode: bool = Field(False, alias="coordinateMode")
    x_range: Optional[List[float]] = Field(None, alias="xRange")
    y_range: Optional[List[float]] = Field(None, alias="yRange")
    problem_type: Optional[str] = Field(None, alias="problemType")

    @field_validator("x_range", "y_range", mode="before")
    @classmethod
    def _symmetric_range(cls, value: Any) -> Any:
        # A bare number n means [-n, n]
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return [-abs(value), abs(value)]
        return value

    def option(self, name: str, default: Any = None) -> Any:
        """Read a switch by its camelCase key, snake_case name or extra key."""
        extras = self.model_extra or {}
        if name in extras:
            value = extras[name]
            return default if value is None else value
        field_name = _CONFIG_ALIASES.get(name, name)
        if field_name in type(self).model_fields:
            value = getattr(self, field_name)
            return default if value is None else value
        return default


_CONFIG_ALIASES = {
    (info.alias or name): name for name, info in DiagramConfig.model_fields.items()
}


# =============================================================================
# COORDINATE PAYLOADS
# =============================================================================

class CoordinatePoint(BaseModel):
    model_config = ConfigDict(extra="ignore")

    x: float
    y: float
    label: Optional[str] = None


class CoordinateData(BaseModel):
    """Structured payload for coordinate-plane diagrams."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    points: List[CoordinatePoint] = Field(default_factory=list)
    point: Optional[CoordinatePoint] = Field(None, description="Single highlighted point")
    point_label: Optional[str] = Field(None, alias="pointLabel")
    point1: Optional[CoordinatePoint] = None
    point2: Optional[CoordinatePoint] = None
    midpoint: Optional[CoordinatePoint] = None
    coordinate_range: Optional[float] = Field(None, alias="coordinateRange")
    problem_type: Optional[str] = Field(None, alias="problemType")
    show_grid_numbers: Optional[bool] = Field(None, alias="showGridNumbers")

    def all_points(self) -> List[CoordinatePoint]:
        """Plotted points in order, with the two-point form folded in."""
        if self.points:
            return list(self.points)
        folded = []
        for default_label, point in (("A", self.point1), ("B", self.point2)):
            if point is not None:
                folded.append(point if point.label else point.model_copy(update={"label": default_label}))
        return folded

    def highlighted(self) -> Optional[CoordinatePoint]:
        if self.point is None:
            return None
        if self.point_label and not self.point.label:
            return self.point.model_copy(update={"label": self.point_label})
        return self.point


# =============================================================================
# RENDER REQUEST
# =============================================================================

class RenderRequest(BaseModel):
    """One diagram to draw: shape name, numbers, display config."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    shape: str = Field(..., description="Shape name, e.g. 'cylinder', 'sector', 'coordinate-plane'")
    measurements: Dict[str, Any] = Field(default_factory=dict)
    unit: str = Field("", description="Unit suffix for measurement labels")
    data: Optional[Dict[str, Any]] = Field(None, description="Family specific structured payload")
    config: DiagramConfig = Field(default_factory=DiagramConfig)
    svg_id: Optional[str] = Field(None, alias="svgId", description="Root group id override")

    @field_validator("unit", mode="before")
    @classmethod
    def _blank_unit(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("measurements", "config", mode="before")
    @classmethod
    def _empty_mapping(cls, value: Any) -> Any:
        return {} if value is None else value

    def measure(self, key: str, default: Any = None) -> Any:
        value = self.measurements.get(key)
        return default if value is None else value

    def datum(self, key: str, default: Any = None) -> Any:
        value = (self.data or {}).get(key)
        return default if value is None else value

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RenderRequest":
        """
        Build a request from the raw record a generator attaches to a
        problem. Top-level keys the request does not know (``element``,
        ``pairCount``, ``subject`` ...) are folded into ``data``.
        """
        known = {"type", "shape", "measurements", "unit", "data", "config", "svgId", "svg_id"}
        data = dict(payload.get("data") or {})
        for key, value in payload.items():
            if key not in known:
                data.setdefault(key, value)
        return cls(
            shape=payload.get("shape", ""),
            measurements=payload.get("measurements") or {},
            unit=payload.get("unit") or "",
            data=data or None,
            config=payload.get("config") or {},
            svg_id=payload.get("svgId", payload.get("svg_id")),
        )
