# products/views/lot.py

"""
LOT VIEWSET

RULES:
- POST receives a lot (creates it + PURCHASE movement through the stock engine).
- PATCH is metadata-only; quantities are never writable.
- DELETE is a soft delete, rejected while the lot still holds stock.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_VIEW,
    HasAnyCapability,
    HasCapability,
    IsVenueMember,
    get_request_venue_id,
)
from products.models import Lot
from products.serializers import LotReceiveSerializer, LotSerializer
from products.services import StockServiceError, deactivate_lot, list_expiring_lots, receive_lot
from products.views.responses import stock_error_response


class LotViewSet(viewsets.ModelViewSet):
    serializer_class = LotSerializer
    permission_classes = [IsAuthenticated, IsVenueMember]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    filterset_fields = ["product", "active"]

    required_capability = None
    required_any_capabilities = None

    def get_permissions(self):
        self.required_capability = None
        self.required_any_capabilities = None

        if self.action in {"list", "retrieve", "expiring_soon"}:
            self.required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_INVENTORY_EDIT}
            return [IsAuthenticated(), IsVenueMember(), HasAnyCapability()]

        if self.action == "destroy":
            self.required_capability = CAP_INVENTORY_ADJUST
            return [IsAuthenticated(), IsVenueMember(), HasCapability()]

        self.required_capability = CAP_INVENTORY_EDIT
        return [IsAuthenticated(), IsVenueMember(), HasCapability()]

    def get_queryset(self):
        venue_id = get_request_venue_id(self.request)
        return Lot.objects.select_related("product").filter(product__venue_id=venue_id)

    @extend_schema(request=LotReceiveSerializer, responses={201: LotSerializer})
    def create(self, request, *args, **kwargs):
        """
        POST /api/products/lots/

        Receives a new lot; qty_initial is booked as a PURCHASE movement.
        """
        serializer = LotReceiveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            lot = receive_lot(
                venue_id=get_request_venue_id(request),
                user_id=request.user.id,
                **v,
            )
        except StockServiceError as exc:
            return stock_error_response(exc)

        return Response(LotSerializer(lot).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        try:
            lot = deactivate_lot(lot_id=kwargs.get("pk"), venue_id=get_request_venue_id(request))
        except StockServiceError as exc:
            return stock_error_response(exc)

        return Response(LotSerializer(lot).data, status=status.HTTP_200_OK)

    @extend_schema(
        parameters=[OpenApiParameter("days", int, description="Look-ahead window in days (default 30)")],
        responses=LotSerializer(many=True),
    )
    @action(detail=False, methods=["get"], url_path="expiring-soon")
    def expiring_soon(self, request):
        try:
            qs = list_expiring_lots(
                venue_id=get_request_venue_id(request),
                days=request.query_params.get("days") or None,
            )
        except StockServiceError as exc:
            return stock_error_response(exc)

        data = self.get_serializer(qs, many=True).data
        return Response({"count": len(data), "results": data})
