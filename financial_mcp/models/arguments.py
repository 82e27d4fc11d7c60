from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Interval = Literal["1min", "5min", "15min", "30min", "60min", "daily"]
OutputSize = Literal["compact", "full"]
DataType = Literal["json", "csv"]


class ToolArguments(BaseModel):
    """
    Base for per-tool argument models.

    Field aliases follow the camelCase names advertised in the tool input
    schemas; unknown keys are ignored.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class StockPriceArguments(ToolArguments):
    symbol: str = Field(min_length=1, description="Stock ticker symbol.")
    interval: Optional[Interval] = Field(
        default=None,
        description="Time interval between data points.",
    )
    output_size: Optional[OutputSize] = Field(default=None, alias="outputSize")
    data_type: Optional[DataType] = Field(default=None, alias="dataType")


class CompanyFundamentalsArguments(ToolArguments):
    symbol: str = Field(min_length=1, description="Stock ticker symbol.")
    # Plain strings: metrics outside the known set are skipped, not rejected.
    metrics: Optional[List[str]] = Field(
        default=None,
        description="Fundamental metrics to retrieve; defaults to overview.",
    )
