from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional, Dict, List, Tuple
from pydantic import BaseModel, Field
from joyride.config import LOG_LEVEL
from joyride.core.errors import NoCandidatesAvailable
from joyride.core.models import (
    CandidateRoute,
    Provenance,
    RouteGeometry,
    RouteLeg,
    RouteScore,
    RouteStep,
    ScoredRoute,
)
from joyride.core.providers.factory import build_provider
from joyride.core.routing.produce_routes import choose_route
from joyride.core.routing.profiles import (
    DEFAULT_PROFILES,
    RoutePreferences,
    RoutingProfile,
    load_profile,
    save_profile,
    list_profiles,
)
from joyride.core.scoring.engine import ScoringEngine
from joyride.core.selection.selector import select_best_route
from joyride.core.utils.geo import parse_coord, validate_coordinate
from joyride.core.utils.streets import get_street_distances

# joyride/api/main.py
import logging

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
_logger = logging.getLogger(__name__)


class Coordinate(BaseModel):
    lat: float = Field(..., description="Latitude")
    lon: float = Field(..., description="Longitude")
    name: Optional[str] = Field(None, description="Optional place name")


class StepModel(BaseModel):
    names: List[str] = Field(default_factory=list, description="Road names, first is the primary name")
    distance_m: float
    transport_mode: str = "driving"
    road_classes: List[str] = Field(default_factory=list)


class LegModel(BaseModel):
    steps: List[StepModel]


class RouteModel(BaseModel):
    legs: List[LegModel]
    distance_m: float
    expected_travel_time_s: float = 0.0
    geometry: Optional[List[Tuple[float, float]]] = Field(
        None, description="(lat, lon) pairs tracing the route"
    )
    profile: str = "custom"
    index: Optional[int] = Field(None, description="Position within the profile's result; defaults to list position")


class ScoreModel(BaseModel):
    value: float
    components: Dict[str, float]


class ScoredRouteModel(BaseModel):
    route: RouteModel
    score: ScoreModel


class StreetModel(BaseModel):
    street: str
    miles: float


class SelectRouteRequest(BaseModel):
    start: Coordinate
    end: Coordinate
    profiles: Optional[List[str]] = Field(
        None, description="Profile names to request; defaults to automobile + automobile-avoiding-traffic"
    )
    avoid_motorway: bool = True
    max_alternatives: int = Field(2, ge=0, le=5)


class SelectRouteResponse(BaseModel):
    selected: ScoredRouteModel
    alternative_index: Optional[int]
    presented_profile: str
    presented_index: int
    directions: List[StreetModel]
    candidates: List[ScoredRouteModel]


class ScoreRoutesRequest(BaseModel):
    routes: List[RouteModel] = Field(..., min_length=1)


class ScoreRoutesResponse(BaseModel):
    scores: List[Optional[ScoreModel]]
    best_index: int


class ProfileCreateRequest(BaseModel):
    name: str = Field(..., description="Name of the profile")
    identifier: str = Field("driving", description="Directions API profile id")
    weight: str = Field("travel_time", description="Edge weight minimized by the graph provider")
    congestion_by_type: Optional[Dict[str, float]] = Field(
        None, description="Extra share of travel time expected from traffic, by road type"
    )


class ProfileResponse(BaseModel):
    name: str
    identifier: str
    weight: str
    congestion_by_type: Dict[str, float]


class ProfileListResponse(BaseModel):
    profiles: List[str]


app = FastAPI(
    title="Joyride Route Selection API",
    description="Requests candidate routes under several profiles and picks the most fun one to drive.",
    version="1.0.0"
)

# Enable CORS for all origins (adjust in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Create the routing provider unless one was injected already."""
    if getattr(app.state, "provider", None) is not None:
        return
    try:
        app.state.provider = build_provider()
    except Exception as e:
        logging.error(f"Failed to initialize routing provider: {e}", exc_info=True)


def get_provider(request: Request):
    provider = getattr(request.app.state, "provider", None)
    if provider is None:
        raise HTTPException(status_code=500, detail="Routing provider is not initialized")
    return provider


# --- model conversion ---
def _to_candidate(model: RouteModel, position: int) -> CandidateRoute:
    legs = tuple(
        RouteLeg(steps=tuple(
            RouteStep(
                names=tuple(step.names),
                distance_m=step.distance_m,
                transport_mode=step.transport_mode,
                road_classes=frozenset(step.road_classes),
            )
            for step in leg.steps
        ))
        for leg in model.legs
    )
    return CandidateRoute(
        legs=legs,
        distance_m=model.distance_m,
        expected_travel_time_s=model.expected_travel_time_s,
        provenance=Provenance(model.profile, position if model.index is None else model.index),
        geometry=RouteGeometry(tuple(model.geometry)) if model.geometry else None,
    )


def _to_route_model(route: CandidateRoute) -> RouteModel:
    return RouteModel(
        legs=[
            LegModel(steps=[
                StepModel(
                    names=list(step.names),
                    distance_m=step.distance_m,
                    transport_mode=step.transport_mode,
                    road_classes=sorted(step.road_classes),
                )
                for step in leg.steps
            ])
            for leg in route.legs
        ],
        distance_m=route.distance_m,
        expected_travel_time_s=route.expected_travel_time_s,
        geometry=list(route.geometry.coordinates) if route.geometry else None,
        profile=route.provenance.profile,
        index=route.provenance.index,
    )


def _to_score_model(score: RouteScore) -> ScoreModel:
    return ScoreModel(value=score.value, components=dict(score.components))


def _to_scored_model(entry: ScoredRoute) -> ScoredRouteModel:
    return ScoredRouteModel(route=_to_route_model(entry.route), score=_to_score_model(entry.score))


@app.post(
    "/routes/select",
    tags=["Routing"],
    summary="Request candidate routes and select the most enjoyable one",
    response_model=SelectRouteResponse,
)
async def select_route_endpoint(req: SelectRouteRequest, provider=Depends(get_provider)):
    """
    Request routes from the configured provider under every profile,
    score all candidates and return the winner. Returns:
    - selected: the winning route and its score breakdown
    - alternative_index / presented_*: which canonical route to present
    - directions: street-by-street breakdown of the winner
    - candidates: every scored candidate, in pool order
    """
    try:
        validate_coordinate(req.start.lat, req.start.lon, "Origin")
        validate_coordinate(req.end.lat, req.end.lon, "Destination")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        profiles = [load_profile(name) for name in req.profiles] if req.profiles else list(DEFAULT_PROFILES)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    preferences = RoutePreferences(
        avoid_motorway=req.avoid_motorway,
        max_alternatives=req.max_alternatives,
    )
    origin = parse_coord(req.start, name=req.start.name)
    destination = parse_coord(req.end, name=req.end.name)

    try:
        selection = await choose_route(provider, origin, destination, profiles, preferences)
    except NoCandidatesAvailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    presented = selection.presentation.route
    return SelectRouteResponse(
        selected=_to_scored_model(selection.selected),
        alternative_index=selection.presentation.alternative_index,
        presented_profile=presented.provenance.profile,
        presented_index=presented.provenance.index,
        directions=[
            StreetModel(street=name, miles=round(miles, 2))
            for name, miles in get_street_distances(selection.selected.route.steps)
        ],
        candidates=[_to_scored_model(entry) for entry in selection.scored_pool],
    )


@app.post(
    "/routes/score",
    tags=["Routing"],
    summary="Score routes computed elsewhere",
    response_model=ScoreRoutesResponse,
)
def score_routes_endpoint(req: ScoreRoutesRequest):
    """
    Score each route with the default factors. Routes without any steps
    get a null score; best_index points at the highest scoring route.
    """
    candidates = [_to_candidate(model, i) for i, model in enumerate(req.routes)]
    engine = ScoringEngine()
    try:
        scored = engine.score_pool(candidates)
    except NoCandidatesAvailable as e:
        raise HTTPException(status_code=400, detail=str(e))

    best = select_best_route(scored)
    by_route = {id(entry.route): entry for entry in scored}
    scores = [
        _to_score_model(by_route[id(c)].score) if id(c) in by_route else None
        for c in candidates
    ]
    best_index = next(i for i, c in enumerate(candidates) if c is best.route)
    return ScoreRoutesResponse(scores=scores, best_index=best_index)


@app.post(
    "/profiles",
    tags=["Customization"],
    summary="Create or update a custom profile",
    response_model=ProfileResponse,
)
def create_profile(payload: ProfileCreateRequest):
    """
    Create or update a custom profile with a name. Profiles can be reused
    by listing the profile name in route selection requests.
    """
    profile = RoutingProfile(
        name=payload.name,
        identifier=payload.identifier,
        weight=payload.weight,
        congestion_by_type=dict(payload.congestion_by_type or {}),
    )
    try:
        save_profile(profile)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Error creating profile: {e}",
        )
    return ProfileResponse(
        name=profile.name,
        identifier=profile.identifier,
        weight=profile.weight,
        congestion_by_type=profile.congestion_by_type,
    )


@app.get(
    "/profiles",
    tags=["Customization"],
    summary="List all available profiles",
    response_model=ProfileListResponse,
)
def list_profiles_endpoint():
    """
    Get the preset profiles followed by every saved custom profile.
    """
    try:
        return ProfileListResponse(profiles=list_profiles())
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Error listing profiles: {e}",
        )
