"""Customer rollup API routes."""

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.runtime import DashboardRuntime
from api.v1.dependencies import get_customer_view, get_runtime
from api.v1.schemas.customer import (
    CustomerListResponse,
    CustomerOrdersResponse,
    CustomerResponse,
    CustomerStatsResponse,
)
from api.v1.schemas.order import OrderResponse
from core.exceptions import CustomerNotFoundError
from core.rate_limit import READ_LIMIT, limiter
from domain.services.rollups import CustomerRollupView, CustomerSegment, CustomerSort, paginate

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get(
    "",
    response_model=CustomerListResponse,
    summary="List customers",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_customers(
    request: Request,
    user: CurrentUser,
    sort_by: CustomerSort = Query(CustomerSort.NAME, description="name, orders or recent"),
    segment: CustomerSegment = Query(CustomerSegment.ALL, description="all, active or new"),
    search: str = Query("", max_length=200, description="Matches name or email"),
    page: int = Query(1, ge=1),
    view: CustomerRollupView = Depends(get_customer_view),
    runtime: DashboardRuntime = Depends(get_runtime),
) -> CustomerListResponse:
    """Customers derived from the order stream, filtered, sorted and paged."""
    per_page = runtime.settings.customers_per_page
    customers = view.list_customers(sort_by=sort_by, segment=segment, search=search)
    return CustomerListResponse(
        data=[CustomerResponse.model_validate(c) for c in paginate(customers, page, per_page)],
        meta={
            "page": page,
            "per_page": per_page,
            "total": len(customers),
            "total_pages": -(-len(customers) // per_page),
        },
    )


@router.get(
    "/stats",
    response_model=CustomerStatsResponse,
    summary="Customer headline numbers",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_customer_stats(
    request: Request,
    user: CurrentUser,
    view: CustomerRollupView = Depends(get_customer_view),
) -> CustomerStatsResponse:
    return CustomerStatsResponse.model_validate(view.stats())


@router.get(
    "/{email}/orders",
    response_model=CustomerOrdersResponse,
    summary="Order history of a customer",
    responses={404: {"description": "No orders under this email"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_customer_orders(
    request: Request,
    email: str,
    user: CurrentUser,
    view: CustomerRollupView = Depends(get_customer_view),
) -> CustomerOrdersResponse:
    """All orders placed under the customer's account, newest first."""
    customer = view.get(email)
    if customer is None:
        raise CustomerNotFoundError(email)
    orders = await view.order_history(customer)
    return CustomerOrdersResponse(
        customer=CustomerResponse.model_validate(customer),
        data=[OrderResponse.from_record(o) for o in orders],
    )
