"""
URL configuration for public order API endpoints.
"""

from django.urls import path

from api.v1.orders import views

urlpatterns = [
    path(
        "orders",
        views.CreateOrderView.as_view(),
        name="create-order",
    ),
    path(
        "webhooks/payment",
        views.PaymentWebhookView.as_view(),
        name="payment-webhook",
    ),
]
