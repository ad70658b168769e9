import hmac
import os
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from .db.repo import get_repository
from .exceptions import RailLeaseError
from .models.asset import AssetWrite, StatusUpdate
from .models.assistant import LeaseRateRequest, MaintenanceRequest, RiskAssessmentRequest, RiskZoneRequest
from .models.leasing import ApplicationCreate, ApplicationReview, ApplicationStatus, LeaseStatus
from .services.asset_service import AssetService
from .services.assistant_llm import AssistantLLM, get_assistant
from .services.filters import criteria_from_params
from .services.leasing_service import LeasingService
from .utils.logging import get_logger, kv

LOGGER = get_logger("api")

app = FastAPI(title="Railway Asset Leasing API")
router = APIRouter(prefix="/api")


@app.middleware("http")
async def _log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    LOGGER.info(
        "request_done %s",
        kv(method=request.method, path=request.url.path, status=response.status_code, ms=f"{elapsed_ms:.1f}"),
    )
    return response


# ---------------------------------------------------------------------------
# Errors are always returned as {"error": "..."}
# ---------------------------------------------------------------------------


@app.exception_handler(RailLeaseError)
async def _domain_error(request: Request, exc: RailLeaseError) -> JSONResponse:
    if exc.status_code >= 500:
        LOGGER.error("request_failed path=%s error=%s", request.url.path, exc)
    return JSONResponse({"error": str(exc) or type(exc).__name__}, status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body') or 'body'}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse({"error": f"Invalid request body: {problems}"}, status_code=400)


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("unhandled_error path=%s", request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def require_admin(authorization: Optional[str] = Header(None)) -> None:
    """Shared-secret check for administrative writes; open when ADMIN_TOKEN is unset."""

    expected = os.getenv("ADMIN_TOKEN")
    if not expected:
        return
    token = authorization or ""
    if token.startswith("Bearer "):
        token = token[len("Bearer "):]
    if not hmac.compare_digest(token.encode(), expected.encode()):
        raise HTTPException(401, detail="Unauthorized")


def asset_service(repo=Depends(get_repository)) -> AssetService:
    return AssetService(repo)


def leasing_service(repo=Depends(get_repository)) -> LeasingService:
    return LeasingService(repo)


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


@router.get("/assets")
def list_assets(
    city: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    min_size: Optional[str] = Query(None, alias="minSize"),
    max_size: Optional[str] = Query(None, alias="maxSize"),
    min_rent: Optional[str] = Query(None, alias="minRent"),
    max_rent: Optional[str] = Query(None, alias="maxRent"),
    available_from: Optional[str] = Query(None, alias="availableFrom"),
    available_to: Optional[str] = Query(None, alias="availableTo"),
    near_lat: Optional[str] = Query(None, alias="nearLat"),
    near_lng: Optional[str] = Query(None, alias="nearLng"),
    max_distance: Optional[str] = Query(None, alias="maxDistance"),
    service: AssetService = Depends(asset_service),
):
    criteria = criteria_from_params(
        {
            "city": city,
            "type": type,
            "status": status,
            "minSize": min_size,
            "maxSize": max_size,
            "minRent": min_rent,
            "maxRent": max_rent,
            "availableFrom": available_from,
            "availableTo": available_to,
            "nearLat": near_lat,
            "nearLng": near_lng,
            "maxDistance": max_distance,
        }
    )
    return jsonable_encoder({"data": service.search(criteria)})


@router.get("/assets/{asset_id}")
def get_asset(asset_id: str, service: AssetService = Depends(asset_service)):
    return jsonable_encoder({"data": service.get(asset_id)})


@router.post("/assets", status_code=201, dependencies=[Depends(require_admin)])
def create_asset(body: AssetWrite, service: AssetService = Depends(asset_service)):
    return jsonable_encoder({"data": service.create(body)})


@router.put("/assets/{asset_id}", dependencies=[Depends(require_admin)])
def update_asset(asset_id: str, body: AssetWrite, service: AssetService = Depends(asset_service)):
    return jsonable_encoder({"data": service.update(asset_id, body)})


@router.patch("/assets/{asset_id}/status", dependencies=[Depends(require_admin)])
def set_asset_status(asset_id: str, body: StatusUpdate, service: AssetService = Depends(asset_service)):
    return jsonable_encoder({"data": service.set_status(asset_id, body.status)})


@router.delete("/assets/{asset_id}", dependencies=[Depends(require_admin)])
def delete_asset(asset_id: str, service: AssetService = Depends(asset_service)):
    service.delete(asset_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Applications, leases, dashboard
# ---------------------------------------------------------------------------


@router.get("/applications")
def list_applications(
    email: Optional[str] = Query(None),
    status: Optional[ApplicationStatus] = Query(None),
    service: LeasingService = Depends(leasing_service),
):
    return jsonable_encoder({"data": service.list_applications(email=email, status=status)})


@router.post("/applications", status_code=201)
def submit_application(body: ApplicationCreate, service: LeasingService = Depends(leasing_service)):
    return jsonable_encoder({"data": service.submit(body)})


@router.patch("/applications/{application_id}", dependencies=[Depends(require_admin)])
def review_application(
    application_id: str,
    body: ApplicationReview,
    service: LeasingService = Depends(leasing_service),
):
    return jsonable_encoder({"data": service.review(application_id, body.status)})


@router.get("/leases")
def list_leases(status: Optional[LeaseStatus] = Query(None), service: LeasingService = Depends(leasing_service)):
    return jsonable_encoder({"data": service.list_leases(status=status)})


@router.get("/dashboard", dependencies=[Depends(require_admin)])
def dashboard(service: LeasingService = Depends(leasing_service)):
    return jsonable_encoder({"data": service.dashboard()})


# ---------------------------------------------------------------------------
# Assistive flows
# ---------------------------------------------------------------------------


@router.post("/ai/assess-risk")
def assess_risk(body: RiskAssessmentRequest, assistant: AssistantLLM = Depends(get_assistant)):
    return assistant.assess_risk(body).model_dump(by_alias=True)


@router.post("/ai/suggest-lease-rate")
def suggest_lease_rate(
    body: LeaseRateRequest,
    assistant: AssistantLLM = Depends(get_assistant),
    service: AssetService = Depends(asset_service),
):
    return assistant.suggest_lease_rate(body, service.snapshot()).model_dump(by_alias=True)


@router.post("/ai/predict-maintenance")
def predict_maintenance(body: MaintenanceRequest, assistant: AssistantLLM = Depends(get_assistant)):
    return assistant.predict_maintenance(body).model_dump(by_alias=True)


@router.post("/ai/predict-risk-zones")
def predict_risk_zones(body: RiskZoneRequest, assistant: AssistantLLM = Depends(get_assistant)):
    return assistant.predict_risk_zones(body).model_dump(by_alias=True)


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/llm_probe")
def llm_probe(assistant: AssistantLLM = Depends(get_assistant)):
    return assistant.probe()


app.include_router(router)
