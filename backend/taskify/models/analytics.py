from pydantic import BaseModel


class TrendPoint(BaseModel):
    date: str
    created: int
    completed: int


class CategoryCount(BaseModel):
    category: str
    count: int


class AnalyticsReport(BaseModel):
    stats: dict[str, int]
    completion_rate: int
    priorities: dict[str, int]
    trend: list[TrendPoint]
    categories: list[CategoryCount]
