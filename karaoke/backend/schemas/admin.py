"""Schemas for the admin dashboard."""

from typing import List
from pydantic import BaseModel, Field


class DashboardStats(BaseModel):
    total_songs: int = 0
    total_users: int = 0
    total_performances: int = 0
    revenue: int = 0  # IDR
    revenue_display: str = "Rp 0"


class Activity(BaseModel):
    type: str  # "song", "user", "tournament", "payment"
    action: str
    details: str
    time: str
    icon: str = ""
    color: str = ""


class DashboardTab(BaseModel):
    id: str
    label: str
    icon: str


class DashboardResponse(BaseModel):
    title: str
    subtitle: str
    tabs: List[DashboardTab] = Field(default_factory=list)
    stats: DashboardStats
    recent_activity: List[Activity] = Field(default_factory=list)
