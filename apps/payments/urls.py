from django.urls import path
from . import views

app_name = 'payments'

urlpatterns = [
    # Checkout success handler posts order/payment ids + signature here
    path('verify/', views.verify_payment_callback, name='verify'),

    # Checkout failure / dismissal
    path('failed/', views.payment_failed_callback, name='failed'),

    # Razorpay server-side webhook (CSRF-exempt)
    path('webhook/', views.razorpay_webhook, name='webhook'),
]
