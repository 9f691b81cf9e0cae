from django.urls import path
from . import views

urlpatterns = [
    path('rooms/<str:room_id>/checkout/', views.start_checkout, name='start_checkout'),
    path('rooms/<str:room_id>/verify-payment/', views.verify_payment, name='verify_payment'),
    path('stripe/webhook/', views.payment_webhook, name='payment_webhook'),
    path('stripe/publishable-key/', views.publishable_key, name='publishable_key'),
    path('prices/', views.list_prices, name='list_prices'),
]
