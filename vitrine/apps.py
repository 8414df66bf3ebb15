"""
Django AppConfig para Vitrine.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class VitrineConfig(AppConfig):
    name = "vitrine"
    label = "vitrine"
    verbose_name = _("Catálogo")
    default_auto_field = "django.db.models.BigAutoField"
