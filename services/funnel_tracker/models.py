from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

EngagementLevel = Literal["low", "medium", "high"]


class FunnelEventBase(BaseModel):
    session_id: str
    timestamp: int # epoch milliseconds
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def event_name(self) -> str:
        return self.kind # type: ignore[attr-defined]

    def to_payload(self) -> Dict[str, Any]:
        """Flat dict sent to analytics sinks and the local buffer; core fields win over `data` keys."""
        payload = dict(self.data)
        payload.update(self.model_dump(mode="json", exclude={"data"}))
        payload["event_type"] = self.event_name
        return payload


class FunnelStageEvent(FunnelEventBase):
    kind: Literal["funnel_stage"] = "funnel_stage"
    stage: int
    stage_name: str
    stage_display_name: str
    time_since_start: int = 0


class ConversionEvent(FunnelEventBase):
    kind: Literal["conversion"] = "conversion"
    event_type: str
    category: str
    action: str
    value: int
    priority: str

    @property
    def event_name(self) -> str:
        return self.event_type


class EngagementEvent(FunnelEventBase):
    kind: Literal["engagement"] = "engagement"
    engagement_type: str
    time_since_start: int = 0


class ABTestEvent(FunnelEventBase):
    kind: Literal["ab_test"] = "ab_test"
    test_name: str
    variant: str


FunnelEvent = Annotated[
    Union[FunnelStageEvent, ConversionEvent, EngagementEvent, ABTestEvent],
    Field(discriminator="kind"),
]


class FunnelSession(BaseModel):
    session_id: str
    start_time: int # epoch milliseconds
    current_stage: int = Field(1, ge=1, le=8)
    utm_params: Optional[Dict[str, str]] = None
    referrer: str = ""
    user_agent: str = ""
    events: List[FunnelEvent] = Field(default_factory=list)


class ConversionStats(BaseModel):
    total_events: int
    session_events: int
    conversion_events: int
    engagement_events: int
    current_stage: int
    time_on_page: int # milliseconds
    session_id: str


class FunnelReport(BaseModel):
    session_id: str
    conversion_rate: float # percent, for this one session only
    total_events: int
    engagement_score: int
    time_on_page: int # seconds
    current_stage: int
    funnel_progress: Dict[str, bool]
    utm_params: Optional[Dict[str, str]] = None
    events: List[FunnelEvent] = Field(default_factory=list)
    generated_at: datetime
