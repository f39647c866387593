# stellar_finance/main.py
import json
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse, StreamingResponse

from stellar_finance.advisor.chat import ChatSessionStore, markdown_to_html
from stellar_finance.advisor.client import AdvisorClient
from stellar_finance.config import LOG_LEVEL
from stellar_finance.errors import (
    AdvisorError,
    ChatBusyError,
    ChatSessionNotFound,
    ChatStreamError,
    PlannerBusyError,
    VehicleNotFound,
)
from stellar_finance.planner import Planner
from stellar_finance.render import render_results
from stellar_finance.schemas import (
    CREDIT_SCORE_LABELS,
    LIFESTYLE_LABELS,
    ChatRequest,
    RecalculateRequest,
    UserInput,
    ViewRequest,
)
from stellar_finance.settings import (
    DEFAULT_DOWN_PAYMENT,
    DEFAULT_MONTHLY_INCOME,
    DEFAULT_TERM,
    DOWN_PAYMENT_RANGE,
    MONTHLY_INCOME_RANGE,
    TERM_OPTIONS,
)
from stellar_finance.texts import CHAT_ERROR_MSG, RESULTS_HEADLINE

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")


def _ndjson(event: dict) -> str:
    return json.dumps(event) + "\n"


def create_app(advisor=None) -> FastAPI:
    """
    advisor: cualquier objeto con generate_finance_plan / recalculate_plans / stream_chat.
    Si no se pasa, se construye AdvisorClient al arrancar (falla sin OPENAI_API_KEY).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = advisor if advisor is not None else AdvisorClient()
        app.state.advisor = client
        app.state.chat_sessions = ChatSessionStore(client)
        logger.info("Stellar Finance API ready")
        yield

    app = FastAPI(title="Stellar Finance API", lifespan=lifespan)

    # ---------- Errores -> HTTP ----------
    @app.exception_handler(AdvisorError)
    async def _advisor_error(request: Request, exc: AdvisorError):
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(VehicleNotFound)
    async def _vehicle_not_found(request: Request, exc: VehicleNotFound):
        return JSONResponse(status_code=404, content={"detail": f"Vehicle not found: {exc}"})

    @app.exception_handler(ChatSessionNotFound)
    async def _session_not_found(request: Request, exc: ChatSessionNotFound):
        return JSONResponse(status_code=404, content={"detail": f"Chat session not found: {exc}"})

    @app.exception_handler(ChatBusyError)
    @app.exception_handler(PlannerBusyError)
    async def _busy(request: Request, exc: Exception):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    # ---------- UI ----------
    @app.get("/")
    async def root():
        return FileResponse(os.path.join(STATIC_DIR, "index.html"), media_type="text/html")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/options")
    async def options():
        return {
            "creditScores": [{"value": k, "label": v} for k, v in CREDIT_SCORE_LABELS.items()],
            "lifestyles": [{"value": k, "label": v} for k, v in LIFESTYLE_LABELS.items()],
            "terms": TERM_OPTIONS,
            "monthlyIncome": {
                "min": MONTHLY_INCOME_RANGE[0], "max": MONTHLY_INCOME_RANGE[1],
                "step": MONTHLY_INCOME_RANGE[2], "default": DEFAULT_MONTHLY_INCOME,
            },
            "downPayment": {
                "min": DOWN_PAYMENT_RANGE[0], "max": DOWN_PAYMENT_RANGE[1],
                "step": DOWN_PAYMENT_RANGE[2], "default": DEFAULT_DOWN_PAYMENT,
            },
            "defaults": {"creditScore": "GOOD", "lifestyle": "COMMUTER", "term": DEFAULT_TERM},
            "headline": RESULTS_HEADLINE,
        }

    # ---------- Planes ----------
    @app.post("/plans")
    async def create_plan(user_input: UserInput, request: Request):
        planner = Planner(request.app.state.advisor)
        await planner.submit(user_input)
        if planner.error:
            raise AdvisorError(planner.error)
        return {
            "userInput": planner.user_input.model_dump(by_alias=True, mode="json"),
            "response": planner.response.model_dump(by_alias=True, mode="json"),
            "view": planner.view().model_dump(by_alias=True, mode="json"),
        }

    @app.post("/plans/recalculate")
    async def recalculate_plan(req: RecalculateRequest, request: Request):
        planner = Planner.restore(
            request.app.state.advisor, req.user_input, req.response, req.selected_vehicle,
        )
        await planner.change_term(req.term)
        if planner.error:
            raise AdvisorError(planner.error)
        return {
            "userInput": planner.user_input.model_dump(by_alias=True, mode="json"),
            "response": planner.response.model_dump(by_alias=True, mode="json"),
            "view": planner.view().model_dump(by_alias=True, mode="json"),
        }

    @app.post("/plans/view")
    async def plan_view(req: ViewRequest):
        view = render_results(req.response, req.selected_vehicle, req.term)
        return view.model_dump(by_alias=True, mode="json")

    # ---------- Chat ----------
    @app.post("/chat/sessions")
    async def open_chat(request: Request):
        session = request.app.state.chat_sessions.create()
        return {
            "sessionId": session.id,
            "messages": [m.model_dump(by_alias=True) for m in session.to_view()],
        }

    @app.get("/chat/sessions/{session_id}")
    async def chat_transcript(session_id: str, request: Request):
        session = request.app.state.chat_sessions.get(session_id)
        return {
            "sessionId": session.id,
            "busy": session.busy,
            "messages": [m.model_dump(by_alias=True) for m in session.to_view()],
        }

    @app.delete("/chat/sessions/{session_id}")
    async def close_chat(session_id: str, request: Request):
        request.app.state.chat_sessions.close(session_id)
        return {"status": "closed"}

    @app.post("/chat/sessions/{session_id}/messages")
    async def send_chat_message(session_id: str, req: ChatRequest, request: Request):
        session = request.app.state.chat_sessions.get(session_id)
        try:
            stream = session.send(req.text)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        reservation = session.reservation

        async def events():
            text = ""
            try:
                try:
                    async for chunk in stream:
                        text += chunk
                        yield _ndjson({"type": "chunk", "text": chunk, "html": markdown_to_html(text)})
                except ChatStreamError:
                    yield _ndjson({"type": "error", "text": CHAT_ERROR_MSG, "html": markdown_to_html(CHAT_ERROR_MSG)})
                    return
                yield _ndjson({"type": "done", "text": text, "html": markdown_to_html(text)})
            finally:
                # desconexión a medias: cerramos el stream y soltamos la reserva de este envío
                await stream.aclose()
                session.release(reservation)

        return StreamingResponse(events(), media_type="application/x-ndjson")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("stellar_finance.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
