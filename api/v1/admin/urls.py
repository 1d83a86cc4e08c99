"""
URL configuration for administrator API endpoints.
"""

from django.urls import path

from api.v1.admin import views

urlpatterns = [
    path(
        "orders",
        views.ListOrdersView.as_view(),
        name="admin-list-orders",
    ),
    path(
        "orders/<str:order_id>",
        views.OrderDetailView.as_view(),
        name="admin-order-detail",
    ),
    path(
        "orders/<str:order_id>/approve",
        views.ApproveOrderView.as_view(),
        name="admin-approve-order",
    ),
    path(
        "orders/<str:order_id>/resend",
        views.ResendLicenseView.as_view(),
        name="admin-resend-license",
    ),
]
