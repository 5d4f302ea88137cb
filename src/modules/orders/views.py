"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import BasePermission, IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import AdminOrderUpdateDTO, build_place_order_dto
from modules.orders.exceptions import (
    CancellationWindowClosedError,
    OrderError,
    OrderNotFound,
    OrderValidationError,
    StoreFailure,
    TerminalStateError,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer, OrderSerializer
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.users.repositories.django_repository import UserDjangoRepository

# (HTTP status, machine-readable code) per domain failure.
_ERROR_RESPONSES = {
    OrderNotFound: (status.HTTP_404_NOT_FOUND, "order_not_found"),
    TerminalStateError: (status.HTTP_409_CONFLICT, "terminal_state"),
    CancellationWindowClosedError: (
        status.HTTP_409_CONFLICT,
        "cancellation_window_closed",
    ),
    StoreFailure: (status.HTTP_503_SERVICE_UNAVAILABLE, "store_unavailable"),
}


def order_error_response(exc: OrderError) -> Response:
    """Translate a domain exception into its HTTP response."""
    if isinstance(exc, OrderValidationError):
        return Response(
            {"detail": "Invalid order data.", "code": "invalid", "errors": exc.errors},
            status=status.HTTP_400_BAD_REQUEST,
        )
    http_status, code = _ERROR_RESPONSES.get(
        type(exc), (status.HTTP_400_BAD_REQUEST, "order_error")
    )
    detail = "Order not found." if isinstance(exc, OrderNotFound) else str(exc)
    return Response({"detail": detail, "code": code}, status=http_status)


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``; all writes go through the
    service/repository layer.
    """

    queryset = Order.objects.all()
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "updated_at", "total_price", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            user_repository=UserDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def get_permissions(self) -> list[BasePermission]:
        if self.action in {"list", "partial_update"}:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "mine"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        return OrderDjangoRepository().queryset()

    # ------------------------------------------------------------------
    # Place
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        The authenticated caller is always the buyer.
        """
        try:
            dto = build_place_order_dto(request.user.id, request.data)
            order = self._service.place_order(dto)
        except OrderError as exc:
            return order_error_response(exc)

        out = OrderSerializer(order)
        return Response(out.data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/  (staff)

        ``scope=active|history``, ``status``, ``buyer``, date and total
        ranges are handled by ``OrderFilter``.
        """
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @action(detail=False, methods=["get"])
    def mine(self, request: Request) -> Response:
        """GET /api/v1/orders/mine/?scope=active|history"""
        try:
            orders = self._service.list_orders_for_buyer(
                request.user.id, scope=request.query_params.get("scope")
            )
        except OrderError as exc:
            return order_error_response(exc)

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(orders, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/

        Staff see every order; buyers only their own.
        """
        buyer_id = None if request.user.is_staff else request.user.id
        try:
            order = self._service.get_order(pk, buyer_id=buyer_id)
        except OrderError as exc:
            return order_error_response(exc)
        serializer = OrderSerializer(order)
        return Response(serializer.data)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/  (staff)

        Accepts any of ``status``, ``delivery_option``, ``admin_message``.
        """
        try:
            dto = AdminOrderUpdateDTO.from_payload(request.data)
            order = self._service.apply_admin_update(
                order_id=pk, dto=dto, changed_by_id=request.user.id
            )
        except OrderError as exc:
            return order_error_response(exc)

        serializer = OrderSerializer(order)
        return Response(serializer.data)

    @action(detail=True, methods=["post"], url_path="confirm-received")
    def confirm_received(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/confirm-received/"""
        try:
            order = self._service.confirm_received(order_id=pk, buyer_id=request.user.id)
        except OrderError as exc:
            return order_error_response(exc)

        serializer = OrderSerializer(order)
        return Response(serializer.data)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/

        Allowed while the order has not shipped and delivery is at
        least 3 days out.
        """
        try:
            order = self._service.cancel_order(order_id=pk, buyer_id=request.user.id)
        except OrderError as exc:
            return order_error_response(exc)

        serializer = OrderSerializer(order)
        return Response(serializer.data)

    # ------------------------------------------------------------------
    # Review eligibility
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"], url_path="review-eligibility")
    def review_eligibility(self, request: Request) -> Response:
        """GET /api/v1/orders/review-eligibility/?product=<id>"""
        product_id = request.query_params.get("product")
        if not product_id:
            return Response(
                {"detail": "Query parameter 'product' is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            eligible = self._service.is_eligible_for_review(request.user.id, product_id)
        except OrderError as exc:
            return order_error_response(exc)
        return Response({"product": product_id, "eligible": eligible})
