from __future__ import annotations

import json
import logging

from django import forms
from django.contrib import admin, messages
from django.http import HttpRequest, HttpResponseRedirect
from django.template.response import TemplateResponse
from django.urls import path, reverse
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _
from unfold.admin import ModelAdmin, TabularInline
from unfold.contrib.filters.admin.choice_filters import ChoicesRadioFilter
from unfold.decorators import action, display

from .actors import Actor
from .exceptions import VitrineError
from .models import Product, ProductEvent, ProductVariant
from .pricing import PricingEngine
from .services import CatalogService


logger = logging.getLogger(__name__)


def history_action(modeladmin, request, object_id):
    """Action que redireciona para o histórico do objeto."""
    url = reverse(
        f"admin:{modeladmin.model._meta.app_label}_{modeladmin.model._meta.model_name}_history",
        args=[object_id],
    )
    return HttpResponseRedirect(url)


def _actor(request: HttpRequest) -> Actor:
    return Actor.from_user(request.user)


class RejectForm(forms.Form):
    reason = forms.CharField(
        label=_("Motivo da rejeição"),
        widget=forms.Textarea(attrs={"rows": 4}),
        required=True,
    )


class ProductVariantInline(TabularInline):
    model = ProductVariant
    extra = 0
    readonly_fields = ("position", "size", "color", "color_code", "sku", "price", "stock", "variant_image")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class ProductEventInline(TabularInline):
    model = ProductEvent
    extra = 0
    readonly_fields = ("type", "actor", "payload", "created_at")
    can_delete = False
    ordering = ("-created_at", "-id")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(ModelAdmin):
    list_display = (
        "title",
        "ref",
        "brand",
        "category",
        "price_display",
        "stock_display",
        "approval_badge",
        "is_published",
        "vendor",
        "updated_at",
    )
    list_filter = (("approval_status", ChoicesRadioFilter), "is_published", "gender")
    search_fields = ("ref", "title", "slug", "brand", "category", "vendor", "product_variants__sku")
    ordering = ("-updated_at", "-id")
    date_hierarchy = "created_at"
    list_filter_submit = True
    list_fullwidth = True
    compressed_fields = True

    inlines = [ProductVariantInline, ProductEventInline]

    actions = ["approve_selected"]
    actions_detail = ["approve_detail_action", "reject_detail_action", "history_detail_action"]

    fieldsets = (
        (
            _("Identidade"),
            {"fields": ("ref", "title", "slug", "description", "category", "brand", "gender"), "classes": ("tab",)},
        ),
        (
            _("Preço e estoque"),
            {
                "fields": ("currency", "base_price", "cost_price", "discount_percentage", "final_price", "stock"),
                "classes": ("tab",),
            },
        ),
        (_("Imagens"), {"fields": ("images_display",), "classes": ("tab",)}),
        (
            _("Moderação"),
            {"fields": ("approval_status", "rejection_reason", "is_published", "vendor"), "classes": ("tab",)},
        ),
        (_("Auditoria"), {"fields": ("created_at", "updated_at"), "classes": ("tab",)}),
    )
    # Todos os campos são readonly - escritas passam pelo CatalogService
    # (API do console ou ações de moderação abaixo)
    readonly_fields = (
        "ref",
        "title",
        "slug",
        "description",
        "category",
        "brand",
        "gender",
        "currency",
        "base_price",
        "cost_price",
        "discount_percentage",
        "final_price",
        "stock",
        "images_display",
        "approval_status",
        "rejection_reason",
        "is_published",
        "vendor",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request, obj=None):
        return False

    # Cores de referência BADGES:
    # - pendente=amarelo, aprovado=verde, rejeitado=vermelho
    @display(
        description=_("aprovação"),
        label={"pendente": "warning", "aprovado": "success", "rejeitado": "danger"},
    )
    def approval_badge(self, obj: Product) -> str:
        return obj.get_approval_status_display()

    @display(description=_("preço"), ordering="final_price")
    def price_display(self, obj: Product) -> str:
        if obj.discount_percentage:
            return f"{PricingEngine.format_amount(obj.final_price, obj.currency)} (-{obj.discount_percentage}%)"
        return PricingEngine.format_amount(obj.final_price, obj.currency)

    @display(description=_("estoque"))
    def stock_display(self, obj: Product) -> int:
        return obj.total_stock

    @display(description=_("imagens"))
    def images_display(self, obj: Product) -> str:
        if not obj or not obj.images:
            return "-"
        formatted = json.dumps(obj.images, indent=2, ensure_ascii=False)
        return format_html('<pre class="bg-base-50 border border-base-200 dark:bg-base-800 dark:border-base-700 font-mono overflow-x-auto p-3 rounded-default text-sm">{}</pre>', formatted)

    # ------------------------------------------------------------------ actions

    @admin.action(description=_("Aprovar selecionados"))
    def approve_selected(self, request, queryset):
        approved = 0
        for product in queryset:
            try:
                CatalogService.approve(product.ref, _actor(request))
                approved += 1
            except VitrineError as exc:
                messages.warning(request, f"{product.ref}: {exc.message}")
        if approved:
            messages.success(request, _("{} produto(s) aprovado(s).").format(approved))

    @action(description=_("Aprovar"), url_path="approve-action", icon="check_circle")
    def approve_detail_action(self, request, object_id):
        product = self.get_object(request, object_id)
        if product is None:
            messages.error(request, _("Produto não encontrado."))
            return HttpResponseRedirect(reverse("admin:vitrine_product_changelist"))
        try:
            CatalogService.approve(product.ref, _actor(request))
            messages.success(request, _("Produto aprovado."))
        except VitrineError as exc:
            messages.error(request, exc.message)
        return HttpResponseRedirect(reverse("admin:vitrine_product_change", args=[object_id]))

    @action(description=_("Rejeitar"), url_path="reject-action", icon="block")
    def reject_detail_action(self, request, object_id):
        return HttpResponseRedirect(reverse("admin:vitrine_product_reject", args=[object_id]))

    @action(description=_("Histórico"), url_path="history-action", icon="history")
    def history_detail_action(self, request, object_id):
        return history_action(self, request, object_id)

    def get_urls(self):
        urls = super().get_urls()
        custom = [
            path(
                "<path:object_id>/reject/",
                self.admin_site.admin_view(self.reject_view),
                name="vitrine_product_reject",
            ),
        ]
        return custom + urls

    def reject_view(self, request, object_id):
        product = self.get_object(request, object_id)
        if product is None:
            messages.error(request, _("Produto não encontrado."))
            return HttpResponseRedirect(reverse("admin:vitrine_product_changelist"))

        form = RejectForm(request.POST or None)
        if request.method == "POST" and form.is_valid():
            try:
                CatalogService.reject(product.ref, _actor(request), form.cleaned_data["reason"])
                messages.success(request, _("Produto rejeitado."))
                return HttpResponseRedirect(reverse("admin:vitrine_product_change", args=[object_id]))
            except VitrineError as exc:
                messages.error(request, exc.message)

        context = {
            **self.admin_site.each_context(request),
            "opts": self.model._meta,
            "original": product,
            "form": form,
            "title": _("Rejeitar produto"),
        }
        return TemplateResponse(request, "vitrine/admin/reject_form.html", context)


@admin.register(ProductEvent)
class ProductEventAdmin(ModelAdmin):
    list_display = ("product", "type", "actor", "created_at")
    list_filter = ("type",)
    search_fields = ("product__ref", "product__title", "actor")
    ordering = ("-created_at", "-id")
    readonly_fields = ("product", "type", "actor", "payload", "created_at")

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False
