# stellar_finance/advisor/client.py
"""Cliente del modelo generativo.

Envuelve el SDK de OpenAI (cualquier endpoint compatible vía OPENAI_BASE_URL):
  - generate_finance_plan: perfil -> ApiResponse (3 modelos + tips)
  - recalculate_plans: vehículo + perfil con otro plazo -> 2 planes
  - stream_chat: historial -> fragmentos de texto en orden

No hay reintentos ni caché: una llamada, un try/except.
"""
from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Dict, List

from openai import AsyncOpenAI

from stellar_finance import config
from stellar_finance.advisor.prompts import (
    PLAN_RESPONSE_SCHEMA,
    RECALC_RESPONSE_SCHEMA,
    build_messages,
    build_plan_prompt,
    build_recalc_prompt,
    response_format,
)
from stellar_finance.errors import PlanGenerationError, PlanRecalculationError
from stellar_finance.schemas import ApiResponse, PaymentPlan, SuggestedModel, UserInput

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------------
# Parsing de la respuesta
# ------------------------------------------------------------------------------------
def strip_code_fence(text: str) -> str:
    """
    Algunos modelos envuelven el JSON en ```json ... ``` aunque pidamos JSON puro.
    Solo se quita la valla si el texto abre con una, o si trae una apertura ```json;
    las vallas dentro de un JSON desnudo (p. ej. en "reasoning") no se tocan.
    """
    t = (text or "").strip()
    start = 0 if t.startswith("```") else t.find("```json")
    end = t.rfind("```")
    if start == -1 or end <= start:
        return t
    inner = t[start + 3:end]
    if inner[:4].lower() == "json":
        inner = inner[4:]
    return inner.strip()


def parse_api_response(text: str) -> ApiResponse:
    data = json.loads(strip_code_fence(text))
    return ApiResponse.model_validate(data)


def parse_payment_plans(text: str) -> List[PaymentPlan]:
    """Acepta {"paymentPlans": [...]} o la lista sola. Deben ser exactamente dos."""
    data = json.loads(strip_code_fence(text))
    if isinstance(data, dict):
        if "paymentPlans" not in data:
            raise KeyError("paymentPlans")
        data = data["paymentPlans"]
    if not isinstance(data, list):
        raise ValueError(f"expected a list of payment plans, got {type(data).__name__}")
    if len(data) != 2:
        raise ValueError(f"expected exactly two payment plans, got {len(data)}")
    return [PaymentPlan.model_validate(p) for p in data]


# ------------------------------------------------------------------------------------
# Cliente
# ------------------------------------------------------------------------------------
class AdvisorClient:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        openai_client: Any | None = None,
    ) -> None:
        self.model = model or config.OPENAI_MODEL
        if openai_client is None:
            # Sin credencial no hay planes ni chat: fallamos aquí, no en la primera llamada
            key = api_key or config.require_api_key()
            openai_client = AsyncOpenAI(api_key=key, base_url=base_url or config.OPENAI_BASE_URL)
        self._client = openai_client

    async def _complete_json(self, prompt: str, schema_name: str, schema: Dict[str, Any]) -> str:
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=build_messages(prompt),
            response_format=response_format(schema_name, schema),
        )
        return (response.choices[0].message.content or "").strip()

    async def generate_finance_plan(self, user_input: UserInput) -> ApiResponse:
        prompt = build_plan_prompt(user_input)
        logger.info(
            "Requesting finance plan (term=%s, credit=%s, lifestyle=%s)",
            user_input.term, user_input.credit_score.value, user_input.lifestyle.value,
        )
        try:
            text = await self._complete_json(prompt, "finance_plan", PLAN_RESPONSE_SCHEMA)
            return parse_api_response(text)
        except Exception as e:
            logger.exception("Error generating finance plan")
            raise PlanGenerationError(f"Failed to get financial plan: {e}") from e

    async def recalculate_plans(self, vehicle: SuggestedModel, user_input: UserInput) -> List[PaymentPlan]:
        prompt = build_recalc_prompt(vehicle, user_input)
        logger.info("Recalculating plans for %r at %s months", vehicle.name, user_input.term)
        try:
            text = await self._complete_json(prompt, "payment_plans", RECALC_RESPONSE_SCHEMA)
            return parse_payment_plans(text)
        except Exception as e:
            logger.exception("Error recalculating plans")
            raise PlanRecalculationError(f"Failed to recalculate plans: {e}") from e

    async def stream_chat(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        """Respuesta en streaming: solo los deltas con texto, en el orden en que llegan."""
        stream = await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            stream=True,
        )
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta
