# products/views/stock_movement.py

"""
STOCK MOVEMENT VIEWSET

Thin HTTP adapter over the stock core:

POST stock-movements/                          -> apply_movement (direct signed movement)
POST stock-movements/fefo/                     -> consume_fefo
POST stock-movements/allocate/                 -> allocate_fefo (dry run, no writes)
GET  stock-movements/                          -> ledger, newest first
GET  stock-movements/product/{product_id}/     -> ledger for one product
GET  stock-movements/stock-summary/{product_id}/

The ledger is append-only: there is no update or delete route.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_CONSUME,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_VIEW,
    HasAnyCapability,
    HasCapability,
    IsVenueMember,
    get_request_venue_id,
)
from products.serializers import (
    AllocateSerializer,
    AllocationResultSerializer,
    FEFOConsumeSerializer,
    StockMovementCreateSerializer,
    StockMovementSerializer,
    StockSummarySerializer,
)
from products.services import (
    MovementInstruction,
    StockServiceError,
    allocate_fefo,
    apply_movement,
    consume_fefo,
    get_stock_summary,
    list_movements,
)
from products.views.responses import stock_error_response


class StockMovementViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = StockMovementSerializer
    permission_classes = [IsAuthenticated, IsVenueMember]
    filterset_fields = ["movement_type", "product", "lot"]

    required_capability = None
    required_any_capabilities = None

    def get_permissions(self):
        self.required_capability = None
        self.required_any_capabilities = None

        if self.action in {"list", "retrieve", "by_product", "stock_summary", "allocate"}:
            self.required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_INVENTORY_EDIT}
            return [IsAuthenticated(), IsVenueMember(), HasAnyCapability()]

        if self.action == "fefo":
            self.required_any_capabilities = {CAP_INVENTORY_CONSUME, CAP_INVENTORY_EDIT}
            return [IsAuthenticated(), IsVenueMember(), HasAnyCapability()]

        self.required_capability = CAP_INVENTORY_ADJUST
        return [IsAuthenticated(), IsVenueMember(), HasCapability()]

    def get_queryset(self):
        return list_movements(venue_id=get_request_venue_id(self.request))

    @extend_schema(request=StockMovementCreateSerializer, responses={201: StockMovementSerializer})
    def create(self, request, *args, **kwargs):
        serializer = StockMovementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            movement = apply_movement(
                MovementInstruction(
                    venue_id=get_request_venue_id(request),
                    product_id=v["product_id"],
                    lot_id=v.get("lot_id"),
                    movement_type=v["movement_type"],
                    quantity=v["quantity"],
                    unit_cost=v.get("unit_cost"),
                    reference=v.get("reference", ""),
                    notes=v.get("notes", ""),
                    metadata=v.get("metadata") or {},
                ),
                user_id=request.user.id,
            )
        except StockServiceError as exc:
            return stock_error_response(exc)

        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=FEFOConsumeSerializer, responses={201: StockMovementSerializer(many=True)})
    @action(detail=False, methods=["post"], url_path="fefo")
    def fefo(self, request):
        serializer = FEFOConsumeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            movements = consume_fefo(
                product_id=v["product_id"],
                quantity=v["quantity"],
                venue_id=get_request_venue_id(request),
                user_id=request.user.id,
                movement_type=v["movement_type"],
                reference=v.get("reference"),
                notes=v.get("notes"),
            )
        except StockServiceError as exc:
            return stock_error_response(exc)

        return Response(StockMovementSerializer(movements, many=True).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=AllocateSerializer, responses={200: AllocationResultSerializer})
    @action(detail=False, methods=["post"], url_path="allocate")
    def allocate(self, request):
        serializer = AllocateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            result = allocate_fefo(
                product_id=v["product_id"],
                quantity=v["quantity"],
                venue_id=get_request_venue_id(request),
            )
        except StockServiceError as exc:
            return stock_error_response(exc)

        return Response(AllocationResultSerializer(result).data, status=status.HTTP_200_OK)

    @extend_schema(responses={200: StockMovementSerializer(many=True), 404: OpenApiResponse()})
    @action(detail=False, methods=["get"], url_path=r"product/(?P<product_id>[^/.]+)")
    def by_product(self, request, product_id=None):
        try:
            qs = list_movements(venue_id=get_request_venue_id(request), product_id=product_id)
        except StockServiceError as exc:
            return stock_error_response(exc)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)

    @extend_schema(responses={200: StockSummarySerializer, 404: OpenApiResponse()})
    @action(detail=False, methods=["get"], url_path=r"stock-summary/(?P<product_id>[^/.]+)")
    def stock_summary(self, request, product_id=None):
        try:
            summary = get_stock_summary(product_id=product_id, venue_id=get_request_venue_id(request))
        except StockServiceError as exc:
            return stock_error_response(exc)

        return Response(StockSummarySerializer(summary).data, status=status.HTTP_200_OK)
