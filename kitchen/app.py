from __future__ import annotations

import logging
from typing import Union

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from .analytics.aggregator import InvalidScopeIdentifier, validate_identifier
from .analytics.models import (
    CustomerSatisfaction,
    FoodItemSatisfaction,
    NoFeedback,
    SatisfactionDashboard,
    SatisfactionTrend,
    TrendPeriod,
)
from .analytics.reports import SatisfactionReports
from .analytics.synthesizer import RecommendationSynthesizer
from .dependencies import get_reports, get_synthesizer
from .orders.models import ChefOrder, OrderCreate, StatusUpdate
from .orders.service import InvalidOrderStatus, chef_queue, create_order, recent_orders, update_status
from .store.base import FeedbackNotFound, FoodItemNotFound, OrderNotFound, StoreError
from .store.memory import MemoryStore, get_store
from .store.models import (
    Customer,
    CustomerCreate,
    FeedbackCreate,
    FeedbackRecord,
    FoodItem,
    FoodItemCreate,
    Order,
    ReplyRequest,
    ReplyResponse,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Kitchen Satisfaction API", version="1.0.0")


# ── Error mapping ────────────────────────────────────────────────────────


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(InvalidScopeIdentifier)
async def invalid_identifier_handler(request: Request, exc: InvalidScopeIdentifier) -> JSONResponse:
    return _failure(400, str(exc))


@app.exception_handler(InvalidOrderStatus)
async def invalid_status_handler(request: Request, exc: InvalidOrderStatus) -> JSONResponse:
    return _failure(400, str(exc))


@app.exception_handler(FoodItemNotFound)
async def food_item_not_found_handler(request: Request, exc: FoodItemNotFound) -> JSONResponse:
    return _failure(404, "Food item not found")


@app.exception_handler(FeedbackNotFound)
async def feedback_not_found_handler(request: Request, exc: FeedbackNotFound) -> JSONResponse:
    return _failure(404, "Feedback not found")


@app.exception_handler(OrderNotFound)
async def order_not_found_handler(request: Request, exc: OrderNotFound) -> JSONResponse:
    return _failure(404, "Order not found")


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return _failure(503, "Feedback store unavailable")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Customers & menu ─────────────────────────────────────────────────────


@app.post("/customers", response_model=Customer, status_code=201)
def add_customer(body: CustomerCreate, store: MemoryStore = Depends(get_store)) -> Customer:
    return store.add_customer(body.first_name, body.last_name, body.role)


@app.post("/food-items", response_model=FoodItem, status_code=201)
def add_food_item(body: FoodItemCreate, store: MemoryStore = Depends(get_store)) -> FoodItem:
    return store.add_food_item(body.name, body.price, body.description, body.preparation_time)


@app.post("/food-items/{food_item_id}/feedback", response_model=FeedbackRecord, status_code=201)
def add_feedback(
    food_item_id: str,
    body: FeedbackCreate,
    store: MemoryStore = Depends(get_store),
) -> FeedbackRecord:
    if body.user_id is not None:
        validate_identifier(body.user_id, "customer")
    return store.add_feedback(food_item_id, body.rating, body.comment, body.user_id, body.created_at)


# ── Orders ───────────────────────────────────────────────────────────────


@app.post("/orders", response_model=Order, status_code=201)
def place_order(body: OrderCreate, store: MemoryStore = Depends(get_store)) -> Order:
    return create_order(store, body)


@app.get("/orders/recent", response_model=list[Order])
def get_recent_orders(store: MemoryStore = Depends(get_store)) -> list[Order]:
    return recent_orders(store)


@app.get("/orders/chef", response_model=list[ChefOrder])
async def get_chef_orders(
    analyze: bool = False,
    store: MemoryStore = Depends(get_store),
    synthesizer: RecommendationSynthesizer = Depends(get_synthesizer),
) -> list[ChefOrder]:
    return await chef_queue(store, synthesizer if analyze else None)


@app.patch("/orders/{order_id}/status", response_model=Order)
def patch_order_status(
    order_id: str,
    body: StatusUpdate,
    store: MemoryStore = Depends(get_store),
) -> Order:
    return update_status(store, order_id, body.status)


# ── Satisfaction analytics ───────────────────────────────────────────────


@app.get("/orders/analytics/satisfaction", response_model=SatisfactionDashboard)
async def satisfaction_dashboard(
    reports: SatisfactionReports = Depends(get_reports),
) -> SatisfactionDashboard:
    return await reports.dashboard()


@app.get("/orders/analytics/satisfaction-trend", response_model=SatisfactionTrend)
async def satisfaction_trend(
    period: TrendPeriod = TrendPeriod.month,
    reports: SatisfactionReports = Depends(get_reports),
) -> SatisfactionTrend:
    return await reports.trend(period)


@app.get(
    "/orders/analytics/customers/{customer_id}/satisfaction",
    response_model=Union[CustomerSatisfaction, NoFeedback],
)
async def customer_satisfaction(
    customer_id: str,
    reports: SatisfactionReports = Depends(get_reports),
) -> CustomerSatisfaction | NoFeedback:
    return await reports.customer(customer_id)


@app.get(
    "/orders/analytics/food-items/{food_item_id}/satisfaction",
    response_model=Union[FoodItemSatisfaction, NoFeedback],
)
async def food_item_satisfaction(
    food_item_id: str,
    reports: SatisfactionReports = Depends(get_reports),
) -> FoodItemSatisfaction | NoFeedback:
    return await reports.food_item(food_item_id)


@app.post(
    "/orders/food-items/{food_item_id}/feedback/{feedback_id}/reply",
    response_model=ReplyResponse,
)
def reply_to_feedback(
    food_item_id: str,
    feedback_id: str,
    body: ReplyRequest,
    reports: SatisfactionReports = Depends(get_reports),
) -> ReplyResponse:
    return ReplyResponse(feedback=reports.reply(food_item_id, feedback_id, body.reply))
