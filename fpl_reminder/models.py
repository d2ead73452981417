from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class Gameweek(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int = Field(gt=0, description="Gameweek number")
    deadline_time: AwareDatetime = Field(description="Transfer deadline (timezone-aware)")
    name: Optional[str] = None


class ReminderDecision(BaseModel):
    should_send: bool = False
    window: Optional[float] = None


class EmailMessage(BaseModel):
    sender: str
    to: str
    subject: str
    html: str


class DeliveryReceipt(BaseModel):
    id: str


class CheckResult(BaseModel):
    gameweek: Optional[Gameweek] = None
    hours_remaining: Optional[float] = None
    decision: ReminderDecision = Field(default_factory=ReminderDecision)
    receipt: Optional[DeliveryReceipt] = None
    recorded: bool = False
    checked_at: Optional[datetime] = None
