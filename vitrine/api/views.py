"""
Vitrine API Views — ViewSets para a REST API.

Mapeamento de erros do core para HTTP:
    ValidationError    → 400
    AuthorizationError → 403
    NotFoundError      → 404
    StateConflictError → 409

Corpo de erro: {"code": ..., "message": ..., "context": {...}}

Configuração de Throttling (settings.py):

    REST_FRAMEWORK = {
        'DEFAULT_THROTTLE_RATES': {
            'anon': '100/hour',
            'user': '1000/hour',
            'vitrine_write': '120/minute',     # criação/edição/remoção
            'vitrine_moderate': '60/minute',   # aprovação/rejeição
        }
    }
"""

from __future__ import annotations

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes, throttle_classes
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle

from vitrine.actors import Actor
from vitrine.conf import get_vitrine_setting
from vitrine.contrib.currency import get_rate_backend
from vitrine.exceptions import (
    AuthorizationError,
    NotFoundError,
    StateConflictError,
    ValidationError,
    VitrineError,
)
from vitrine.pricing import SUPPORTED_CURRENCIES, PricingEngine
from vitrine.services import CatalogService, ListingService

from .serializers import (
    ConsoleProductSerializer,
    ExpandVariantsSerializer,
    PriceQuerySerializer,
    ProductEventSerializer,
    ProductSerializer,
    RejectSerializer,
)


logger = logging.getLogger(__name__)


ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StateConflictError: status.HTTP_409_CONFLICT,
}


def _get_actor(request) -> Actor:
    return Actor.from_user(request.user)


def _error_response(exc: VitrineError) -> Response:
    http_status = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return Response(
        {"code": exc.code, "message": exc.message, "context": exc.context},
        status=http_status,
    )


def _currency_context(request) -> dict:
    """Contexto de conversão quando ?currency=XXX é informado."""
    currency = (request.query_params.get("currency") or "").upper()
    if not currency:
        return {}
    base = get_vitrine_setting("BASE_CURRENCY")
    return {"currency": currency, "rates": get_rate_backend().get_rates(base)}


def _page_params(request) -> tuple[int, int]:
    try:
        page = int(request.query_params.get("page") or 1)
        limit = int(request.query_params.get("limit") or 20)
    except ValueError:
        raise ValidationError(
            code="invalid_field",
            message="Paginação inválida",
            context={"fields": ["page", "limit"]},
        )
    return page, limit


class WriteRateThrottle(UserRateThrottle):
    """
    Throttle para criação/edição/remoção de produtos.

    Configure via 'vitrine_write' em DEFAULT_THROTTLE_RATES.
    """

    scope = "vitrine_write"


class ModerateRateThrottle(UserRateThrottle):
    """
    Throttle para aprovação/rejeição.

    Configure via 'vitrine_moderate' em DEFAULT_THROTTLE_RATES.
    """

    scope = "vitrine_moderate"


class ProductViewSet(viewsets.ViewSet):
    """
    ViewSet do console (admin/vendor).

    Endpoints:
        GET    /api/products                - Lista (admin: todos; vendor: próprios)
        POST   /api/products                - Submete novo produto
        GET    /api/products/{ref}          - Detalhes
        PUT    /api/products/{ref}          - Substitui documento
        PATCH  /api/products/{ref}          - Idem (campos ausentes mantidos)
        DELETE /api/products/{ref}          - Remove
        POST   /api/products/{ref}/approve  - PENDING → APPROVED (admin)
        POST   /api/products/{ref}/reject   - PENDING → REJECTED (admin, reason)
        GET    /api/products/{ref}/price    - Preço para seleção ?size=&color=&currency=
        GET    /api/products/{ref}/events   - Audit log
    """

    permission_classes = get_vitrine_setting("DEFAULT_PERMISSION_CLASSES")
    throttle_classes = [AnonRateThrottle, UserRateThrottle]
    lookup_field = "ref"

    WRITE_ACTIONS = ("create", "update", "partial_update", "destroy")

    def get_throttles(self):
        if self.action in self.WRITE_ACTIONS:
            return [WriteRateThrottle()]
        return super().get_throttles()

    def _get_product(self, request, ref: str):
        product = ListingService.for_actor(_get_actor(request)).filter(ref=ref).first()
        if product is None:
            raise NotFoundError(
                code="product_not_found",
                message=f"Produto não encontrado: {ref}",
                context={"ref": ref},
            )
        return product

    def list(self, request):
        try:
            page, limit = _page_params(request)
            qs = ListingService.filter_products(
                ListingService.for_actor(_get_actor(request)), request.query_params
            )
            approval_status = request.query_params.get("approval_status")
            if approval_status:
                qs = qs.filter(approval_status=approval_status.upper())
            result = ListingService.paginate(qs, page, limit)
        except VitrineError as e:
            return _error_response(e)
        result["products"] = ConsoleProductSerializer(
            result["products"], many=True, context=_currency_context(request)
        ).data
        return Response(result)

    def retrieve(self, request, ref=None):
        try:
            product = self._get_product(request, ref)
        except VitrineError as e:
            return _error_response(e)
        return Response(ConsoleProductSerializer(product, context=_currency_context(request)).data)

    def create(self, request):
        actor = _get_actor(request)
        try:
            product = CatalogService.create(request.data, actor)
        except VitrineError as e:
            logger.info(
                "Product create rejected",
                extra={"actor": str(actor), "error_code": e.code, "error_message": e.message},
            )
            return _error_response(e)
        return Response(ConsoleProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request, ref=None):
        actor = _get_actor(request)
        try:
            product = CatalogService.update(ref, request.data, actor)
        except VitrineError as e:
            logger.info(
                "Product update rejected",
                extra={"product_ref": ref, "actor": str(actor), "error_code": e.code},
            )
            return _error_response(e)
        return Response(ConsoleProductSerializer(product).data)

    def partial_update(self, request, ref=None):
        return self.update(request, ref=ref)

    def destroy(self, request, ref=None):
        try:
            CatalogService.delete(ref, _get_actor(request))
        except VitrineError as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="approve", throttle_classes=[ModerateRateThrottle])
    def approve(self, request, ref=None):
        try:
            product = CatalogService.approve(ref, _get_actor(request))
        except VitrineError as e:
            return _error_response(e)
        return Response(ConsoleProductSerializer(product).data)

    @action(detail=True, methods=["post"], url_path="reject", throttle_classes=[ModerateRateThrottle])
    def reject(self, request, ref=None):
        s = RejectSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            product = CatalogService.reject(ref, _get_actor(request), s.validated_data["reason"])
        except VitrineError as e:
            return _error_response(e)
        return Response(ConsoleProductSerializer(product).data)

    @action(detail=True, methods=["get"], url_path="price")
    def price(self, request, ref=None):
        s = PriceQuerySerializer(data=request.query_params)
        s.is_valid(raise_exception=True)
        size = s.validated_data.get("size")
        color = s.validated_data.get("color")
        try:
            product = self._get_product(request, ref)
            amount = PricingEngine.price_for_selection(product, size=size, color=color)
        except VitrineError as e:
            return _error_response(e)

        payload = {
            "ref": product.ref,
            "size": size,
            "color": color,
            "final_price": str(product.final_price),
            "price": str(amount),
            "currency": product.currency,
            "stock": PricingEngine.stock_for_selection(product, size=size, color=color),
        }
        ctx = _currency_context(request)
        if ctx:
            converted, currency = PricingEngine.convert_for_display(
                amount, ctx["currency"], ctx["rates"], base_currency=product.currency
            )
            payload["display_price"] = str(converted)
            payload["display_currency"] = currency
            payload["display_formatted"] = PricingEngine.format_amount(converted, currency)
        return Response(payload)

    @action(detail=True, methods=["get"], url_path="events")
    def events(self, request, ref=None):
        try:
            product = self._get_product(request, ref)
        except VitrineError as e:
            return _error_response(e)
        return Response(ProductEventSerializer(product.events.all(), many=True).data)


class StorefrontViewSet(viewsets.ViewSet):
    """
    ViewSet da vitrine (público).

    Endpoints:
        GET /api/storefront                 - Produtos visíveis (filtros, ordenação, paginação)
        GET /api/storefront/{ref|slug}      - Detalhes de produto visível
        GET /api/storefront/{ref|slug}/related - Relacionados (mesma categoria ou marca)
    """

    permission_classes = get_vitrine_setting("STOREFRONT_PERMISSION_CLASSES")
    throttle_classes = [AnonRateThrottle, UserRateThrottle]
    lookup_field = "key"

    def _get_visible(self, key: str):
        product = ListingService.visible().filter(ref=key).first() or ListingService.visible().filter(slug=key).first()
        if product is None:
            raise NotFoundError(
                code="product_not_found",
                message=f"Produto não encontrado: {key}",
                context={"key": key},
            )
        return product

    def list(self, request):
        try:
            page, limit = _page_params(request)
            result = ListingService.list_visible(request.query_params, page, limit)
        except VitrineError as e:
            return _error_response(e)
        result["products"] = ProductSerializer(
            result["products"], many=True, context=_currency_context(request)
        ).data
        return Response(result)

    def retrieve(self, request, key=None):
        try:
            product = self._get_visible(key)
        except VitrineError as e:
            return _error_response(e)
        return Response(ProductSerializer(product, context=_currency_context(request)).data)

    @action(detail=True, methods=["get"], url_path="related")
    def related(self, request, key=None):
        try:
            product = self._get_visible(key)
        except VitrineError as e:
            return _error_response(e)
        related = ListingService.related(product)
        return Response(ProductSerializer(related, many=True, context=_currency_context(request)).data)


@api_view(["POST"])
@permission_classes(get_vitrine_setting("DEFAULT_PERMISSION_CLASSES"))
@throttle_classes([WriteRateThrottle])
def expand_variants(request):
    """
    Expande linhas de variante em lote de um rascunho (sem persistir).

    Body: {"variants": [...], "index": 0}
    """
    s = ExpandVariantsSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        draft = CatalogService.apply_bulk_variant(
            {"variants": s.validated_data["variants"]},
            s.validated_data.get("index"),
        )
    except VitrineError as e:
        return _error_response(e)
    return Response(draft)


@api_view(["GET"])
@permission_classes(get_vitrine_setting("STOREFRONT_PERMISSION_CLASSES"))
def currency_rates(request):
    """Taxas de câmbio a partir da moeda base + moedas suportadas."""
    base = get_vitrine_setting("BASE_CURRENCY")
    rates = get_rate_backend().get_rates(base)
    return Response(
        {
            "base": base,
            "rates": {code: str(rate) for code, rate in sorted(rates.items()) if code in SUPPORTED_CURRENCIES},
            "currencies": {
                code: {"symbol": info.symbol, "name": info.name, "decimals": info.decimals}
                for code, info in SUPPORTED_CURRENCIES.items()
            },
        }
    )
