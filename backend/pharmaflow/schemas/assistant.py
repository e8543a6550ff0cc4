from pydantic import BaseModel, Field


class DrugQuestion(BaseModel):
    drug_name: str = Field(min_length=2, max_length=255)
    question: str = Field(default="", max_length=2000)


class AssistantAnswer(BaseModel):
    drug_name: str
    answer: str
    available: bool
