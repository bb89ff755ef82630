from django.urls import path
from . import views

app_name = 'bookings'

urlpatterns = [
    # Read-only price/date check before booking
    path('preview/', views.booking_preview, name='preview'),

    # POST creates a pending booking + gateway order; GET lists the caller's bookings
    path('', views.bookings, name='bookings'),

    path('<uuid:booking_id>/', views.booking_detail, name='detail'),
]
