import json
from typing import Optional, Union, Literal
from urllib.parse import unquote
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _join_list(v):
    if isinstance(v, (list, tuple)):
        return ",".join(str(item) for item in v)
    return v


class FilterOverride(BaseModel):
    """Ad-hoc filters sent with ``filters=true`` as URI-encoded JSON"""
    timeSlot: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    tags: Optional[str] = None
    operator: Literal["OR", "AND"] = "OR"
    sentimentType: Optional[str] = None
    dataSource: Optional[str] = None
    location: Optional[str] = None
    language: Optional[str] = None

    @field_validator('tags', 'sentimentType', 'dataSource', 'location', 'language', mode='before')
    @classmethod
    def join_lists(cls, v):
        return _join_list(v)

    @field_validator('operator', mode='before')
    @classmethod
    def normalize_operator(cls, v):
        if v is None or v == '':
            return "OR"
        return str(v).strip().upper()

    @field_validator('timeSlot')
    @classmethod
    def validate_time_slot(cls, v):
        if v in (None, '', 'Custom Dates', 'today', '24h'):
            return v
        if not str(v).strip().isdigit():
            raise ValueError('timeSlot must be "Custom Dates", "today", "24h" or a number of days')
        return str(v).strip()

    @field_validator('startDate', 'endDate')
    @classmethod
    def validate_date_format(cls, v):
        if v:
            try:
                datetime.strptime(v[:10], '%Y-%m-%d')
            except ValueError:
                raise ValueError('Date must be in YYYY-MM-DD format')
        return v


class ReportRequest(BaseModel):
    topicId: Optional[Union[int, str]] = None
    type: str
    greaterThanTime: Optional[str] = None
    lessThanTime: Optional[str] = None
    subtopicId: Optional[int] = None
    touchId: Optional[int] = None
    filters: bool = False
    filterData: Optional[FilterOverride] = None
    isScadUser: bool = False
    selectedTab: Optional[str] = None
    parentAccountId: Optional[str] = None
    unTopic: bool = False
    aidType: Optional[str] = None
    category: Optional[str] = None
    userId: Optional[int] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "topicId": 2473,
                "type": "channelSentiments",
                "greaterThanTime": "2023-01-01",
                "lessThanTime": "2023-04-30",
                "subtopicId": None,
                "touchId": None,
                "filters": False,
                "filterData": None,
                "isScadUser": False,
                "selectedTab": None,
                "parentAccountId": "292",
                "unTopic": False
            }
        }
    )

    @field_validator('subtopicId', 'touchId', 'userId', mode='before')
    @classmethod
    def empty_as_none(cls, v):
        if v in ('', 'null', 'undefined'):
            return None
        return v

    @field_validator('parentAccountId', mode='before')
    @classmethod
    def account_as_string(cls, v):
        if v is None or v == '':
            return None
        return str(v)

    @field_validator('filterData', mode='before')
    @classmethod
    def decode_filter_data(cls, v):
        if v in (None, '', 'null'):
            return None
        if isinstance(v, str):
            try:
                return json.loads(unquote(v))
            except ValueError:
                raise ValueError('filterData must be URI-encoded JSON')
        return v

    @field_validator('greaterThanTime', 'lessThanTime')
    @classmethod
    def validate_time(cls, v):
        if v in (None, ''):
            return None
        return v

    @property
    def filter_override(self) -> Optional[FilterOverride]:
        """The override, only when the request asks for it"""
        if self.filters and self.filterData is not None:
            return self.filterData
        return None


class FeedRequest(ReportRequest):
    category: str = Field(..., min_length=1)
    size: int = Field(30, ge=1, le=100)
