# stellar_finance/planner.py
"""
Estado transitorio de la pantalla de resultados y su orquestación:
  submit        -> un request de plan -> respuesta + primer vehículo seleccionado
  change_term   -> un recálculo del vehículo seleccionado -> se empalma en una respuesta NUEVA
  select_vehicle-> solo cambia la selección

La respuesta nunca se muta: cada éxito la reemplaza completa.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from stellar_finance.errors import AdvisorError, PlannerBusyError, VehicleNotFound
from stellar_finance.render import find_vehicle, render_results
from stellar_finance.schemas import ApiResponse, PaymentPlan, ResultsView, SuggestedModel, UserInput
from stellar_finance.settings import DEFAULT_TERM

logger = logging.getLogger(__name__)


def apply_recalculated_plans(
    response: ApiResponse, vehicle_name: str, plans: List[PaymentPlan]
) -> Tuple[ApiResponse, SuggestedModel]:
    """
    Devuelve (respuesta nueva, vehículo nuevo). Solo cambia el vehículo con ese nombre;
    los demás modelos pasan tal cual (mismos objetos).
    """
    vehicle = find_vehicle(response, vehicle_name)
    if vehicle is None:
        raise VehicleNotFound(vehicle_name)
    updated = vehicle.model_copy(update={"payment_plans": list(plans)})
    models = [updated if m.name == vehicle_name else m for m in response.suggested_models]
    return response.model_copy(update={"suggested_models": models}), updated


class Planner:
    def __init__(self, client) -> None:
        self._client = client
        self.user_input: Optional[UserInput] = None
        self.response: Optional[ApiResponse] = None
        self.selected: Optional[SuggestedModel] = None
        self.term: int = DEFAULT_TERM
        self.is_loading = False
        self.is_recalculating = False
        self.error: Optional[str] = None

    @classmethod
    def restore(
        cls,
        client,
        user_input: UserInput,
        response: ApiResponse,
        selected_vehicle: str,
        term: Optional[int] = None,
    ) -> "Planner":
        """Reconstruye el estado que manda el navegador (el servidor no guarda nada)."""
        planner = cls(client)
        planner.user_input = user_input
        planner.response = response
        planner.selected = find_vehicle(response, selected_vehicle)
        if planner.selected is None:
            raise VehicleNotFound(selected_vehicle)
        planner.term = term if term is not None else user_input.term
        return planner

    @property
    def busy(self) -> bool:
        return self.is_loading or self.is_recalculating

    def _ensure_idle(self) -> None:
        if self.busy:
            raise PlannerBusyError("A plan request is already in flight.")

    async def submit(self, user_input: UserInput) -> None:
        self._ensure_idle()
        self.is_loading = True
        self.error = None
        self.response = None
        self.selected = None
        self.user_input = user_input
        self.term = user_input.term
        try:
            response = await self._client.generate_finance_plan(user_input)
        except AdvisorError as e:
            logger.warning("Plan request failed: %s", e)
            self.error = str(e) or "An unknown error occurred."
        else:
            self.response = response
            if response.suggested_models:
                self.selected = response.suggested_models[0]
        finally:
            self.is_loading = False

    async def change_term(self, term: int) -> None:
        if self.user_input is None or self.selected is None or self.response is None:
            logger.debug("Term change to %s ignored: no results yet", term)
            return
        self._ensure_idle()
        self.term = term
        self.is_recalculating = True
        self.error = None
        updated_input = self.user_input.with_term(term)
        self.user_input = updated_input
        vehicle = self.selected
        try:
            plans = await self._client.recalculate_plans(vehicle, updated_input)
            # los planes viejos siguen visibles hasta aquí
            self.response, self.selected = apply_recalculated_plans(self.response, vehicle.name, plans)
        except AdvisorError as e:
            logger.warning("Recalculation for %s failed: %s", vehicle.name, e)
            self.error = str(e) or "An unknown error occurred during recalculation."
        finally:
            self.is_recalculating = False

    def select_vehicle(self, name: str) -> None:
        if self.response is None:
            return
        vehicle = find_vehicle(self.response, name)
        if vehicle is None:
            raise VehicleNotFound(name)
        self.selected = vehicle

    def view(self) -> Optional[ResultsView]:
        if self.response is None:
            return None
        return render_results(
            self.response,
            self.selected.name if self.selected else None,
            self.term,
            is_loading=self.is_loading,
            is_recalculating=self.is_recalculating,
            error=self.error,
        )
