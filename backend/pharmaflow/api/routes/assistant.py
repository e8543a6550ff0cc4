"""Drug information assistant."""
from fastapi import APIRouter, Depends

from pharmaflow.api.deps import get_current_employee
from pharmaflow.models.employee import Employee
from pharmaflow.schemas.assistant import DrugQuestion, AssistantAnswer
from pharmaflow.services import assistant_service

router = APIRouter()


@router.post("/drug-info", response_model=AssistantAnswer)
def drug_info(data: DrugQuestion, _: Employee = Depends(get_current_employee)):
    """Always 200: when the LLM is unavailable the fallback message is returned with available=false."""
    answer, available = assistant_service.analyze_drug_interaction(data.drug_name, data.question)
    return AssistantAnswer(drug_name=data.drug_name, answer=answer, available=available)
