"""Application use cases."""

from tixbridge.application.use_cases.markers import MarkersUseCase
from tixbridge.application.use_cases.user_admin import UserAdminUseCase
from tixbridge.application.use_cases.user_annotations import UserAnnotationsUseCase
from tixbridge.application.use_cases.vendor_proxy import VendorProxyUseCase

__all__ = [
    "MarkersUseCase",
    "UserAdminUseCase",
    "UserAnnotationsUseCase",
    "VendorProxyUseCase",
]
