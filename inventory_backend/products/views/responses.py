# products/views/responses.py

from rest_framework import status
from rest_framework.response import Response

from products.services.errors import StockNotFoundError, StockServiceError


def stock_error_response(exc: StockServiceError) -> Response:
    """NotFound -> 404, every other stock rule violation -> 400."""
    code = status.HTTP_404_NOT_FOUND if isinstance(exc, StockNotFoundError) else status.HTTP_400_BAD_REQUEST
    return Response({"detail": str(exc)}, status=code)
