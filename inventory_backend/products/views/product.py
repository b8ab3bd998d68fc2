# products/views/product.py

"""
PRODUCT VIEWSET

- Venue-scoped product catalogue (venue comes from the authenticated user).
- current_stock is read-only here: quantities change only through
  /stock-movements/.
- low-stock alert and ledger reconciliation report.
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
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
from products.models import Product
from products.serializers import ProductSerializer, ReconciliationReportSerializer
from products.services import StockServiceError, list_low_stock_products, reconcile_product_stock
from products.views.responses import stock_error_response


class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, IsVenueMember]
    http_method_names = ["get", "post", "patch", "head", "options"]
    filterset_fields = ["is_active", "track_lots", "unit_of_measure"]

    required_capability = None
    required_any_capabilities = None

    def get_permissions(self):
        # reset per request so action state never leaks
        self.required_capability = None
        self.required_any_capabilities = None

        if self.action in {"list", "retrieve", "low_stock"}:
            self.required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_INVENTORY_EDIT}
            return [IsAuthenticated(), IsVenueMember(), HasAnyCapability()]

        if self.action == "reconcile":
            self.required_capability = CAP_INVENTORY_ADJUST
            return [IsAuthenticated(), IsVenueMember(), HasCapability()]

        self.required_capability = CAP_INVENTORY_EDIT
        return [IsAuthenticated(), IsVenueMember(), HasCapability()]

    def get_queryset(self):
        venue_id = get_request_venue_id(self.request)
        return Product.objects.filter(venue_id=venue_id).order_by("name")

    def perform_create(self, serializer):
        serializer.save(venue_id=get_request_venue_id(self.request))

    @extend_schema(responses=ProductSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        qs = list_low_stock_products(venue_id=get_request_venue_id(request))
        data = self.get_serializer(qs, many=True).data
        return Response({"count": len(data), "results": data})

    @extend_schema(
        responses={
            200: ReconciliationReportSerializer,
            404: OpenApiResponse(description="Product not found in this venue"),
        }
    )
    @action(detail=True, methods=["get"], url_path="reconcile")
    def reconcile(self, request, pk=None):
        try:
            report = reconcile_product_stock(product_id=pk, venue_id=get_request_venue_id(request))
        except StockServiceError as exc:
            return stock_error_response(exc)

        return Response(ReconciliationReportSerializer(report).data, status=status.HTTP_200_OK)
