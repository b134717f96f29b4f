from pydantic import BaseModel, Field


class HolidayCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class HolidayResponse(BaseModel):
    name: str
