"""
Audit result schema.

Strongly typed contract between the audit pipeline that produces a result and
the renderers that consume it. Models are frozen: renderers only read them.
JSON keys are camelCase; every field is also reachable by its snake_case name.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field

SCHEMA_VERSION = 1

_FROZEN = {"populate_by_name": True, "frozen": True}


class ScoreDisplayMode(str, Enum):
    BINARY = "binary"
    NUMERIC = "numeric"
    INFORMATIVE = "informative"
    MANUAL = "manual"
    NOT_APPLICABLE = "not-applicable"
    ERROR = "error"


# --- Details (tagged by "type") ---


class TableHeading(BaseModel):
    """Column definition shared by table and opportunity details."""

    key: str
    item_type: Optional[str] = Field(None, alias="itemType")
    value_type: Optional[str] = Field(None, alias="valueType")
    text: Optional[str] = None
    label: Optional[str] = None
    granularity: Optional[float] = None
    display_unit: Optional[str] = Field(None, alias="displayUnit")

    model_config = _FROZEN

    @property
    def column_type(self) -> str:
        return self.item_type or self.value_type or "text"

    @property
    def title(self) -> str:
        return self.text or self.label or ""


class TableDetails(BaseModel):
    type: Literal["table"]
    headings: List[TableHeading] = Field(default_factory=list)
    items: List[Dict[str, Any]] = Field(default_factory=list)
    summary: Dict[str, Any] = Field(default_factory=dict)

    model_config = _FROZEN


class OpportunityDetails(BaseModel):
    type: Literal["opportunity"]
    headings: List[TableHeading] = Field(default_factory=list)
    items: List[Dict[str, Any]] = Field(default_factory=list)
    overall_savings_ms: float = Field(0, alias="overallSavingsMs")
    overall_savings_bytes: Optional[float] = Field(None, alias="overallSavingsBytes")

    model_config = _FROZEN


class CodeDetails(BaseModel):
    type: Literal["code"]
    value: str

    model_config = _FROZEN


class ListDetails(BaseModel):
    """A vertical list of nested details, each carrying its own type tag."""

    type: Literal["list"]
    items: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = _FROZEN


class FilmstripFrame(BaseModel):
    timing: float = 0
    timestamp: float = 0
    data: str

    model_config = _FROZEN


class FilmstripDetails(BaseModel):
    type: Literal["filmstrip"]
    scale: Optional[float] = None
    items: List[FilmstripFrame] = Field(default_factory=list)

    model_config = _FROZEN


class CrcRequest(BaseModel):
    url: str
    start_time: float = Field(alias="startTime")
    end_time: float = Field(alias="endTime")
    response_received_time: Optional[float] = Field(None, alias="responseReceivedTime")
    transfer_size: float = Field(0, alias="transferSize")

    model_config = _FROZEN


class CrcNode(BaseModel):
    request: CrcRequest
    children: Dict[str, "CrcNode"] = Field(default_factory=dict)

    model_config = _FROZEN


class CrcLongestChain(BaseModel):
    duration: float = 0  # ms
    length: int = 0
    transfer_size: float = Field(0, alias="transferSize")

    model_config = _FROZEN


class CriticalRequestChainDetails(BaseModel):
    type: Literal["criticalrequestchain"]
    chains: Dict[str, CrcNode] = Field(default_factory=dict)
    longest_chain: CrcLongestChain = Field(default_factory=CrcLongestChain, alias="longestChain")

    model_config = _FROZEN


class ValueDetails(BaseModel):
    """Scalar details: text, url, thumbnail, numeric, bytes, ms."""

    type: str
    value: Any = None
    granularity: Optional[float] = None
    display_unit: Optional[str] = Field(None, alias="displayUnit")

    model_config = _FROZEN


class NodeDetails(BaseModel):
    type: Literal["node"]
    path: Optional[str] = None
    selector: Optional[str] = None
    snippet: Optional[str] = None

    model_config = _FROZEN


class LinkDetails(BaseModel):
    type: Literal["link"]
    text: str
    url: str

    model_config = _FROZEN


# --- Result tree ---


class EnvironmentEntry(BaseModel):
    """One runtime setting shown in the report header."""

    name: str
    description: str = ""
    enabled: bool = True

    model_config = _FROZEN


class RuntimeConfig(BaseModel):
    environment: List[EnvironmentEntry] = Field(default_factory=list)

    model_config = _FROZEN


class AuditGroup(BaseModel):
    title: str
    description: str = ""

    model_config = _FROZEN


class Audit(BaseModel):
    """One scored check. `details` is kept as supplied; DetailsRenderer checks its shape."""

    id: str = ""
    title: str
    description: str = ""
    score: Optional[float] = None
    score_display_mode: str = Field(ScoreDisplayMode.BINARY.value, alias="scoreDisplayMode")
    display_value: Optional[Union[str, List[Any]]] = Field(None, alias="displayValue")
    details: Optional[Any] = None
    group: Optional[str] = None
    error_message: Optional[str] = Field(None, alias="errorMessage")
    explanation: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    model_config = _FROZEN

    @property
    def mode(self) -> ScoreDisplayMode:
        """Score display mode; modes this renderer does not know read as informative."""
        try:
            return ScoreDisplayMode(self.score_display_mode)
        except ValueError:
            return ScoreDisplayMode.INFORMATIVE


# Items that fail validation are kept as the raw value so one bad entry
# can be isolated by the renderer instead of failing the whole load.
AuditEntry = Annotated[Union[Audit, Any], Field(union_mode="left_to_right")]


class Category(BaseModel):
    id: str = ""
    name: str = Field(alias="name", validation_alias=AliasChoices("name", "title"))
    description: str = ""
    score: Optional[float] = None
    audits: List[AuditEntry] = Field(default_factory=list)

    model_config = _FROZEN


CategoryEntry = Annotated[Union[Category, Any], Field(union_mode="left_to_right")]


class Result(BaseModel):
    """
    Full audit result as produced by the audit pipeline.
    `requested_url` is the URL as typed; `final_url` is where the page landed
    after redirects.
    """

    schema_version: int = SCHEMA_VERSION
    requested_url: str = Field("", alias="requestedUrl")
    final_url: str = Field(alias="finalUrl")
    user_agent: str = Field("", alias="userAgent")
    generated_time: str = Field(
        alias="generatedTime",
        validation_alias=AliasChoices("generatedTime", "fetchTime"),
    )
    lighthouse_version: str = Field("", alias="lighthouseVersion")
    runtime_config: RuntimeConfig = Field(default_factory=RuntimeConfig, alias="runtimeConfig")
    run_warnings: List[str] = Field(default_factory=list, alias="runWarnings")
    report_categories: List[CategoryEntry] = Field(default_factory=list, alias="reportCategories")
    report_groups: Dict[str, AuditGroup] = Field(default_factory=dict, alias="reportGroups")

    model_config = _FROZEN
