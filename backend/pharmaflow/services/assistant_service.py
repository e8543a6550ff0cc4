"""Drug information assistant backed by the LLM client."""
import logging
from typing import Optional

from pharmaflow.ai.groq_client import GroqClient, get_groq_client

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "Sorry, I couldn't retrieve the drug information right now."

PROMPT_TEMPLATE = """You are a pharmacist's assistant at a community pharmacy.
Answer briefly and practically for a pharmacist at the counter.

Drug: {drug_name}
{question_block}
Cover: common uses, usual adult dosage, important side effects, major drug
interactions and contraindications. Say clearly when something needs a
doctor's review. Do not invent brand availability or prices."""


def build_prompt(drug_name: str, question: str = "") -> str:
    question = (question or "").strip()
    question_block = f"Question: {question}\n" if question else ""
    return PROMPT_TEMPLATE.format(drug_name=drug_name.strip(), question_block=question_block)


def analyze_drug_interaction(drug_name: str, question: str = "",
                             client: Optional[GroqClient] = None) -> tuple[str, bool]:
    """
    Ask the LLM about a drug.

    Returns (answer, available). available is False when the fallback
    message was used.
    """
    client = client or get_groq_client()
    answer = client.complete(build_prompt(drug_name, question))
    if not answer:
        logger.info(f"Assistant fallback used for '{drug_name}'")
        return FALLBACK_ANSWER, False
    return answer, True
