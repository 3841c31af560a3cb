from pydantic import BaseModel, Field

class BookBase(BaseModel):
    title: str = Field(..., max_length=255)
    author: str = Field(..., max_length=255)

class BookCreate(BookBase):
    quantity: int

class BookSummary(BaseModel):
    id: str
    title: str
    author: str

class BookResponse(BookSummary):
    quantity: int
