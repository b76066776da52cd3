"""
FastAPI server for fleet tyre management.

Provides the REST API for fleets, vehicles, tyres, stock, alerts and
members, the vehicle layout endpoints, and a small HTML layout preview.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, ValidationError

from tyretrack import __version__
from tyretrack.analytics import build_forecast, scan_alerts
from tyretrack.config import Settings
from tyretrack.layout import (
    KNOWN_VEHICLE_TYPES,
    POSITION_LABELS,
    build_vehicle_layout,
    position_options_for_vehicle,
    preview_layout,
    vehicle_category,
)
from tyretrack.models.inputs import (
    FleetCreate,
    FleetRole,
    MemberAdd,
    StockItemCreate,
    TyreCreate,
    TyreUpdate,
    UserCreate,
    VehicleCreate,
    VehicleUpdate,
)
from tyretrack.models.outputs import (
    Alert,
    BatchItemError,
    BatchResult,
    Fleet,
    FleetForecast,
    FleetMember,
    FleetMemberWithUser,
    FleetStats,
    PositionOption,
    StockItem,
    Tyre,
    User,
    Vehicle,
    VehicleLayout,
    VehicleWithTyres,
)
from tyretrack.storage import (
    MEMBER_MANAGER_ROLES,
    AccessDeniedError,
    ConflictError,
    FleetStorage,
    JsonFileStorage,
    NotFoundError,
)

logger = logging.getLogger(__name__)


# HTML layout preview
HTML_UI = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Tyretrack Layout Preview</title>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            max-width: 900px;
            margin: 0 auto;
            padding: 20px;
            color: #333;
        }
        h1 { border-bottom: 3px solid #0f62fe; padding-bottom: 10px; }
        .controls { display: flex; gap: 10px; align-items: center; margin-bottom: 15px; }
        select, input, button { padding: 6px 10px; font-size: 14px; }
        button { background: #0f62fe; color: white; border: none; border-radius: 4px; cursor: pointer; }
        .container { display: flex; gap: 20px; }
        ul { font-size: 13px; }
    </style>
</head>
<body>
    <h1>Tyretrack Layout Preview</h1>
    <div class="controls">
        <select id="vehicleType"></select>
        <label>Axles <input id="axleCount" type="number" min="1" max="10" value="2"></label>
        <button onclick="preview()">Preview</button>
    </div>
    <div class="container">
        <svg id="diagram" width="320" height="1150"></svg>
        <ul id="slotList"></ul>
    </div>
    <script>
        async function loadTypes() {
            const response = await fetch('/api/vehicle-types');
            const data = await response.json();
            document.getElementById('vehicleType').innerHTML =
                data.vehicle_types.map(t => `<option value="${t}">${t}</option>`).join('');
        }

        async function preview() {
            const type = document.getElementById('vehicleType').value;
            const axles = document.getElementById('axleCount').value;
            const response = await fetch(`/api/layout/preview?vehicle_type=${type}&axle_count=${axles}`);
            if (!response.ok) {
                const err = await response.json();
                document.getElementById('slotList').innerHTML = `<li style="color:red;">${err.detail}</li>`;
                return;
            }
            const layout = await response.json();
            const svg = document.getElementById('diagram');
            svg.innerHTML = layout.assignments.map(a => {
                const s = a.slot;
                const w = s.is_dual ? 16 : 20;
                if (s.position === 'spare') {
                    return `<circle cx="${s.x}" cy="${s.y}" r="18" fill="#e0e0e0" stroke="#8d8d8d"><title>${s.label}</title></circle>`;
                }
                return `<rect x="${s.x - w / 2}" y="${s.y - 17}" width="${w}" height="34" rx="4" fill="#e0e0e0" stroke="#8d8d8d"><title>${s.label}</title></rect>`;
            }).join('');
            document.getElementById('slotList').innerHTML =
                `<li><strong>${layout.category}</strong>, ${layout.total_slots} wheel slots</li>` +
                layout.assignments.map(a => `<li>${a.slot.id}: ${a.slot.label} (${a.slot.position})</li>`).join('');
        }

        loadTypes().then(preview);
    </script>
</body>
</html>
"""


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class SuccessResponse(BaseModel):
    """Acknowledgement for writes that return no record."""
    success: bool = True


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_storage(request: Request) -> FleetStorage:
    return request.app.state.storage


def current_user(
    x_user_id: Optional[str] = Header(default=None),
    storage: FleetStorage = Depends(get_storage),
) -> User:
    """Resolve the acting user from the X-User-Id header."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user = storage.get_user(x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


def fleet_role(
    fleet_id: str,
    user: User = Depends(current_user),
    storage: FleetStorage = Depends(get_storage),
) -> FleetRole:
    """Require the acting user to be a member of the path fleet."""
    return storage.require_member(fleet_id, user.id)


def _validation_messages(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
        for err in exc.errors()
    ]


async def _batch_body(request: Request) -> list[Any]:
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, list) or len(body) == 0:
        raise HTTPException(status_code=400, detail="Request body must be a non-empty array")
    return body


# ---------------------------------------------------------------------------
# Reference and layout routes
# ---------------------------------------------------------------------------

reference_router = APIRouter()


@reference_router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def root():
    """Serve the layout preview page."""
    return HTML_UI


@reference_router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check if the API is running."""
    return HealthResponse(status="healthy", version=__version__)


@reference_router.get("/api/positions", tags=["Reference"])
async def list_positions():
    """Get the position enum with default labels."""
    return {
        "positions": [
            {"value": value, "label": label} for value, label in POSITION_LABELS.items()
        ]
    }


@reference_router.get("/api/vehicle-types", tags=["Reference"])
async def list_vehicle_types():
    """Get known vehicle types and their layout category at two axles."""
    return {
        "vehicle_types": list(KNOWN_VEHICLE_TYPES),
        "categories": {t: vehicle_category(t, 2).value for t in KNOWN_VEHICLE_TYPES},
        "note": "Unknown types are laid out as light vehicles; trailers with 3+ axles are heavy.",
    }


@reference_router.get("/api/layout/preview", response_model=VehicleLayout, tags=["Layout"])
async def layout_preview(
    vehicle_type: str = Query(..., min_length=1, description="Vehicle type, e.g. truck"),
    axle_count: int = Query(default=2, ge=1, le=10, description="Number of axles"),
):
    """Generate the empty slot layout for a hypothetical vehicle."""
    return preview_layout(vehicle_type, axle_count)


@reference_router.get(
    "/api/position-options", response_model=list[PositionOption], tags=["Layout"]
)
async def position_options(
    vehicle_type: str = Query(..., min_length=1),
    axle_count: int = Query(default=2, ge=1, le=10),
):
    """Value/label pairs for a tyre position dropdown."""
    return position_options_for_vehicle(vehicle_type, axle_count)


# ---------------------------------------------------------------------------
# Users and fleets
# ---------------------------------------------------------------------------

account_router = APIRouter(prefix="/api", tags=["Fleets"])


@account_router.post("/users", response_model=User, status_code=201)
async def create_user(data: UserCreate, storage: FleetStorage = Depends(get_storage)):
    """Register a user directory entry."""
    return storage.create_user(data)


@account_router.get("/users/me", response_model=User)
async def get_me(user: User = Depends(current_user)):
    return user


@account_router.get("/stats", response_model=FleetStats)
async def get_stats(
    user: User = Depends(current_user),
    storage: FleetStorage = Depends(get_storage),
):
    """Dashboard counters across the user's fleets."""
    return storage.get_stats(user.id)


@account_router.get("/fleets", response_model=list[Fleet])
async def list_fleets(
    user: User = Depends(current_user),
    storage: FleetStorage = Depends(get_storage),
):
    return storage.get_fleets_by_user(user.id)


@account_router.post("/fleets", response_model=Fleet)
async def create_fleet(
    data: FleetCreate,
    user: User = Depends(current_user),
    storage: FleetStorage = Depends(get_storage),
):
    """Create a fleet owned by the acting user."""
    return storage.create_fleet(data, owner_id=user.id)


@account_router.delete("/fleets/{fleet_id}", response_model=SuccessResponse)
async def delete_fleet(
    fleet_id: str,
    user: User = Depends(current_user),
    storage: FleetStorage = Depends(get_storage),
):
    """Delete a fleet. Only its owner may do this."""
    fleet = storage.get_fleet(fleet_id)
    if fleet is None or fleet.owner_id != user.id:
        raise AccessDeniedError("Not authorized")
    storage.delete_fleet(fleet_id)
    return SuccessResponse()


# ---------------------------------------------------------------------------
# Fleet-scoped routes
# ---------------------------------------------------------------------------

fleet_router = APIRouter(prefix="/api/fleets/{fleet_id}", dependencies=[Depends(fleet_role)])


@fleet_router.get("/vehicles", response_model=list[Vehicle], tags=["Vehicles"])
async def list_vehicles(fleet_id: str, storage: FleetStorage = Depends(get_storage)):
    return storage.get_vehicles(fleet_id)


@fleet_router.post("/vehicles", response_model=Vehicle, tags=["Vehicles"])
async def create_vehicle(
    fleet_id: str,
    data: VehicleCreate,
    storage: FleetStorage = Depends(get_storage),
):
    return storage.create_vehicle(fleet_id, data)


@fleet_router.post("/vehicles/batch", response_model=BatchResult, tags=["Vehicles"])
async def create_vehicles_batch(
    fleet_id: str,
    request: Request,
    storage: FleetStorage = Depends(get_storage),
):
    """
    Create many vehicles at once.

    Invalid items are skipped and reported by index; the request fails
    only if no item is valid.
    """
    items = await _batch_body(request)
    valid: list[VehicleCreate] = []
    errors: list[BatchItemError] = []
    for idx, item in enumerate(items):
        try:
            valid.append(VehicleCreate.model_validate(item))
        except ValidationError as e:
            errors.append(BatchItemError(index=idx, errors=_validation_messages(e)))

    if not valid:
        return JSONResponse(
            status_code=400,
            content={
                "detail": "No valid items in batch",
                "errors": [e.model_dump() for e in errors],
            },
        )
    created = storage.create_vehicles_batch(fleet_id, valid)
    return BatchResult(
        created=[v.model_dump(mode="json") for v in created],
        skipped=len(errors),
        errors=errors,
    )


@fleet_router.get("/vehicles/{vehicle_id}", response_model=VehicleWithTyres, tags=["Vehicles"])
async def get_vehicle(
    fleet_id: str,
    vehicle_id: str,
    storage: FleetStorage = Depends(get_storage),
):
    """A vehicle with the tyres fitted to it."""
    return storage.get_vehicle_with_tyres(fleet_id, vehicle_id)


@fleet_router.get("/vehicles/{vehicle_id}/layout", response_model=VehicleLayout, tags=["Layout"])
async def get_vehicle_layout(
    fleet_id: str,
    vehicle_id: str,
    storage: FleetStorage = Depends(get_storage),
):
    """Wheel slots of a vehicle with its tyres matched into them."""
    detail = storage.get_vehicle_with_tyres(fleet_id, vehicle_id)
    return build_vehicle_layout(detail.vehicle, detail.tyres)


@fleet_router.patch("/vehicles/{vehicle_id}", response_model=Vehicle, tags=["Vehicles"])
async def update_vehicle(
    fleet_id: str,
    vehicle_id: str,
    data: VehicleUpdate,
    storage: FleetStorage = Depends(get_storage),
):
    return storage.update_vehicle(fleet_id, vehicle_id, data)


@fleet_router.delete("/vehicles/{vehicle_id}", response_model=SuccessResponse, tags=["Vehicles"])
async def delete_vehicle(
    fleet_id: str,
    vehicle_id: str,
    storage: FleetStorage = Depends(get_storage),
):
    storage.delete_vehicle(fleet_id, vehicle_id)
    return SuccessResponse()


@fleet_router.get("/tyres", response_model=list[Tyre], tags=["Tyres"])
async def list_tyres(fleet_id: str, storage: FleetStorage = Depends(get_storage)):
    return storage.get_tyres(fleet_id)


@fleet_router.post("/tyres", response_model=Tyre, tags=["Tyres"])
async def create_tyre(
    fleet_id: str,
    data: TyreCreate,
    storage: FleetStorage = Depends(get_storage),
):
    return storage.create_tyre(fleet_id, data)


@fleet_router.post("/tyres/batch", response_model=BatchResult, tags=["Tyres"])
async def create_tyres_batch(
    fleet_id: str,
    request: Request,
    storage: FleetStorage = Depends(get_storage),
):
    """Create many tyres at once; invalid items are skipped."""
    items = await _batch_body(request)
    valid: list[TyreCreate] = []
    errors: list[BatchItemError] = []
    for idx, item in enumerate(items):
        try:
            tyre = TyreCreate.model_validate(item)
        except ValidationError as e:
            errors.append(BatchItemError(index=idx, errors=_validation_messages(e)))
            continue
        vehicle = storage.get_vehicle(tyre.vehicle_id) if tyre.vehicle_id else None
        if tyre.vehicle_id and (vehicle is None or vehicle.fleet_id != fleet_id):
            errors.append(
                BatchItemError(
                    index=idx,
                    errors=[f"vehicle_id: Vehicle {tyre.vehicle_id} does not belong to this fleet"],
                )
            )
            continue
        valid.append(tyre)

    if not valid:
        return JSONResponse(
            status_code=400,
            content={
                "detail": "No valid items in batch",
                "errors": [e.model_dump() for e in errors],
            },
        )
    created = storage.create_tyres_batch(fleet_id, valid)
    return BatchResult(
        created=[t.model_dump(mode="json") for t in created],
        skipped=len(errors),
        errors=errors,
    )


@fleet_router.patch("/tyres/{tyre_id}", response_model=Tyre, tags=["Tyres"])
async def update_tyre(
    fleet_id: str,
    tyre_id: str,
    data: TyreUpdate,
    storage: FleetStorage = Depends(get_storage),
):
    return storage.update_tyre(fleet_id, tyre_id, data)


@fleet_router.delete("/tyres/{tyre_id}", response_model=SuccessResponse, tags=["Tyres"])
async def delete_tyre(
    fleet_id: str,
    tyre_id: str,
    storage: FleetStorage = Depends(get_storage),
):
    storage.delete_tyre(fleet_id, tyre_id)
    return SuccessResponse()


@fleet_router.get("/stock", response_model=list[StockItem], tags=["Stock"])
async def list_stock(fleet_id: str, storage: FleetStorage = Depends(get_storage)):
    return storage.get_stock_items(fleet_id)


@fleet_router.post("/stock", response_model=StockItem, tags=["Stock"])
async def create_stock_item(
    fleet_id: str,
    data: StockItemCreate,
    storage: FleetStorage = Depends(get_storage),
):
    return storage.create_stock_item(fleet_id, data)


@fleet_router.delete("/stock/{stock_id}", response_model=SuccessResponse, tags=["Stock"])
async def delete_stock_item(
    fleet_id: str,
    stock_id: str,
    storage: FleetStorage = Depends(get_storage),
):
    storage.delete_stock_item(fleet_id, stock_id)
    return SuccessResponse()


@fleet_router.get("/alerts", response_model=list[Alert], tags=["Alerts"])
async def list_alerts(fleet_id: str, storage: FleetStorage = Depends(get_storage)):
    return storage.get_alerts(fleet_id)


@fleet_router.post("/alerts/scan", response_model=list[Alert], tags=["Alerts"])
async def scan_fleet_alerts(fleet_id: str, storage: FleetStorage = Depends(get_storage)):
    """Raise alerts for worn tyres and low stock. Returns the new alerts."""
    drafts = scan_alerts(
        storage.get_tyres(fleet_id),
        storage.get_stock_items(fleet_id),
        storage.get_alerts(fleet_id),
    )
    return storage.create_alerts(fleet_id, drafts)


@fleet_router.patch("/alerts/mark-all-read", response_model=SuccessResponse, tags=["Alerts"])
async def mark_all_alerts_read(fleet_id: str, storage: FleetStorage = Depends(get_storage)):
    storage.mark_all_alerts_read(fleet_id)
    return SuccessResponse()


@fleet_router.patch("/alerts/{alert_id}", response_model=SuccessResponse, tags=["Alerts"])
async def mark_alert_read(
    fleet_id: str,
    alert_id: str,
    storage: FleetStorage = Depends(get_storage),
):
    storage.mark_alert_read(fleet_id, alert_id)
    return SuccessResponse()


@fleet_router.get("/members", response_model=list[FleetMemberWithUser], tags=["Members"])
async def list_members(fleet_id: str, storage: FleetStorage = Depends(get_storage)):
    return storage.get_fleet_members(fleet_id)


@fleet_router.post("/members", response_model=FleetMember, tags=["Members"])
async def add_member(
    fleet_id: str,
    data: MemberAdd,
    user: User = Depends(current_user),
    storage: FleetStorage = Depends(get_storage),
):
    """Add an existing user to the fleet. Owners and admins only."""
    storage.require_role(fleet_id, user.id, MEMBER_MANAGER_ROLES)
    invitee = storage.get_user_by_email(data.email)
    if invitee is None:
        raise NotFoundError("User not found. They must have an account first.")
    return storage.add_fleet_member(fleet_id, invitee.id, FleetRole(data.role.value))


@fleet_router.delete("/members/{member_id}", response_model=SuccessResponse, tags=["Members"])
async def remove_member(
    fleet_id: str,
    member_id: str,
    user: User = Depends(current_user),
    storage: FleetStorage = Depends(get_storage),
):
    """Remove a member. Owners and admins only; the owner cannot be removed."""
    storage.require_role(fleet_id, user.id, MEMBER_MANAGER_ROLES)
    storage.remove_fleet_member(fleet_id, member_id)
    return SuccessResponse()


@fleet_router.get("/forecast", response_model=FleetForecast, tags=["Analytics"])
async def get_forecast(fleet_id: str, storage: FleetStorage = Depends(get_storage)):
    """Tread, cost and stock projections for the fleet."""
    return build_forecast(storage.get_tyres(fleet_id), storage.get_stock_items(fleet_id))


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------

async def _not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _access_denied(request: Request, exc: AccessDeniedError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


async def _bad_request(request: Request, exc: Exception):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def _invalid_input(request: Request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Invalid input", "errors": errors})


async def _internal_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal error"})


def create_app(
    storage: Optional[FleetStorage] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        storage: Repository to serve; defaults to a JSON snapshot store when
            settings.data_path is set, otherwise an in-memory store
        settings: Runtime settings; read from the environment when omitted
    """
    settings = settings or Settings.from_env()
    if storage is None:
        storage = JsonFileStorage(settings.data_path) if settings.data_path else FleetStorage()

    app = FastAPI(
        title="Tyretrack API",
        description="""
        Fleet tyre management: vehicles, tyres per wheel position, stock,
        alerts and tread/cost forecasts.
        """,
        version=__version__,
    )
    app.state.storage = storage
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(reference_router)
    app.include_router(account_router)
    app.include_router(fleet_router)

    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(AccessDeniedError, _access_denied)
    app.add_exception_handler(ConflictError, _bad_request)
    app.add_exception_handler(ValueError, _bad_request)
    app.add_exception_handler(RequestValidationError, _invalid_input)
    app.add_exception_handler(Exception, _internal_error)
    return app


app = create_app()
