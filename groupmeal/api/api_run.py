from fastapi import (
    FastAPI,
    Query,
    HTTPException,
    Response,
    Body,
    Depends
)
from fastapi.responses import PlainTextResponse

from typing import Optional
import logging

from groupmeal.domain.errors import NoAdmissibleRecipes, PersistenceFailure, ValidationError
from groupmeal.domain.GroceryList import GroceryList
from groupmeal.infra.Household_Repository import HouseholdProfileStore
from groupmeal.api.dependencies import get_catalog, get_households, get_price_table, get_repository
from groupmeal.infra.pdf_utils import generate_pdf_for_grocery_list
from groupmeal.infra.Plan_Repository import PlanRepository
from groupmeal.infra.Price_Table import IngredientPriceTable
from groupmeal.infra.Recipe_Repository import RecipeCatalog
from groupmeal.logic.planning.engine import MealPlanningEngine
from groupmeal.logic.shopping.delivery_format import format_for_delivery
from groupmeal.events.web_observers import start as start_event_observers, get_events as get_web_events

# Routers
from groupmeal.api.routes import recipes

# Logging
logger = logging.getLogger("groupmeal_app")

# Initialize FastAPI app
app = FastAPI(title="Group Meal Planner API")

# Include routers
app.include_router(recipes.router, prefix="/api/recipes")


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers for the planning events feed when the app starts."""
    start_event_observers()
    logger.info("Web observers for planning events started")


def _load_run(run_id: str, repository: PlanRepository) -> dict:
    try:
        run = repository.get_run(run_id)
    except PersistenceFailure as e:
        raise HTTPException(status_code=500, detail=e.to_dict())
    if run is None:
        raise HTTPException(status_code=404, detail=f"Meal plan run '{run_id}' not found")
    return run


# -------------------- API: Meal plans --------------------
@app.post('/api/meal-plans/generate')
def generate_meal_plans(
    payload: dict = Body(...),
    catalog: RecipeCatalog = Depends(get_catalog),
    households: HouseholdProfileStore = Depends(get_households),
    price_table: IngredientPriceTable = Depends(get_price_table),
    repository: PlanRepository = Depends(get_repository),
):
    """
    Generate one meal plan per requested group and the consolidated grocery list.

    Errors:
        422: invalid request, or a group with no admissible recipe for a meal type
        500: the run could not be saved (nothing is stored)
    """
    engine = MealPlanningEngine(catalog, households, price_table, persistence=repository)
    try:
        result = engine.generate_meal_plans(payload)
    except (ValidationError, NoAdmissibleRecipes) as e:
        logger.warning("Rejected meal plan request: %s", e.detail)
        raise HTTPException(status_code=422, detail=e.to_dict())
    except PersistenceFailure as e:
        raise HTTPException(status_code=500, detail=e.to_dict())
    return result.to_dict()


@app.get('/api/meal-plans/{run_id}')
def get_meal_plans(run_id: str, repository: PlanRepository = Depends(get_repository)):
    return _load_run(run_id, repository)


# -------------------- API: Grocery list exports --------------------
@app.get('/api/grocery-lists/{run_id}/pdf')
def export_grocery_list_pdf(run_id: str, repository: PlanRepository = Depends(get_repository)):
    run = _load_run(run_id, repository)
    grocery_list = GroceryList.from_dict(run.get('grocery_list', {}))
    pdf_bytes = generate_pdf_for_grocery_list(grocery_list)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=grocery_list_{run_id}.pdf"
        },
    )


@app.get('/api/grocery-lists/{run_id}/delivery-text', response_class=PlainTextResponse)
def export_delivery_text(run_id: str, repository: PlanRepository = Depends(get_repository)):
    run = _load_run(run_id, repository)
    grocery_list = GroceryList.from_dict(run.get('grocery_list', {}))
    return PlainTextResponse(format_for_delivery(grocery_list))


# -------------------- API: Planning events (polled by frontend) --------------------
@app.get('/api/planning/events')
def api_planning_events(
    since: Optional[int] = Query(default=None, description="Return events with id greater than this value")
):
    """
    Return recent planning events (group assembled, warnings, run generated).

    Client polling strategy:
        1. First call without 'since' to load the current backlog.
        2. Store 'next_cursor' from response.
        3. Subsequent polls: /api/planning/events?since=<next_cursor>
    """
    return get_web_events(since)
