"""Dependency getters for API v1.

Every long-lived object belongs to the ``DashboardRuntime`` stored on
``app.state``; these getters hand out its parts.
"""

from fastapi import Request

from api.runtime import DashboardRuntime
from domain.services.feedback_service import FeedbackService
from domain.services.message_service import MessageService
from domain.services.notification_aggregator import NotificationAggregator
from domain.services.order_service import OrderService
from domain.services.rollups import CustomerRollupView, SalesDashboardView, TopSellersView


def get_runtime(request: Request) -> DashboardRuntime:
    return request.app.state.runtime


def get_aggregator(request: Request) -> NotificationAggregator:
    return get_runtime(request).aggregator


def get_customer_view(request: Request) -> CustomerRollupView:
    return get_runtime(request).customers


def get_top_sellers_view(request: Request) -> TopSellersView:
    return get_runtime(request).top_sellers


def get_sales_view(request: Request) -> SalesDashboardView:
    return get_runtime(request).sales


def get_order_service(request: Request) -> OrderService:
    return get_runtime(request).orders


def get_message_service(request: Request) -> MessageService:
    return get_runtime(request).messages


def get_feedback_service(request: Request) -> FeedbackService:
    return get_runtime(request).feedback
