from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator

EcoGrade = Literal["A", "B", "C", "D", "E"]
SortOption = Literal["relevance", "carbon_asc", "carbon_desc"]
Period = Literal["weekly", "monthly"]
FootprintCategory = Literal["food", "transport", "energy", "shopping", "misc"]

BARCODE_PATTERN = r"^[0-9]{8,14}$"
OBJECT_ID_PATTERN = r"^[0-9a-fA-F]{24}$"


# --- Footprints ---
class FootprintCreate(BaseModel):
    product_barcode: Optional[str] = Field(None, pattern=BARCODE_PATTERN)
    manual_item: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: float = Field(..., gt=0, le=10000)
    carbon_total: float = Field(..., gt=0, le=100000)
    category: FootprintCategory
    logged_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_item_source(self):
        if (self.product_barcode is None) == (self.manual_item is None):
            raise ValueError("Exactly one of product_barcode or manual_item must be provided")
        return self


# --- Goals ---
class GoalUpsert(BaseModel):
    target_value: float = Field(..., gt=0, le=1000000)
    timeframe: Period
    description: Optional[str] = Field(None, max_length=200)
