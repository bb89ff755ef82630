from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = [
        'razorpay_order_id', 'booking', 'amount', 'currency', 'payment_status', 'paid_at', 'created_at'
    ]
    list_filter = ['payment_status', 'currency']
    search_fields = ['razorpay_order_id', 'transaction_id', 'booking__user__email']
    readonly_fields = [
        'id', 'razorpay_order_id', 'transaction_id', 'razorpay_signature',
        'webhook_event_id', 'payment_status', 'paid_at', 'created_at', 'updated_at'
    ]
    fieldsets = (
        ('Payment', {'fields': ('id', 'booking', 'payment_method', 'amount', 'currency', 'payment_status', 'paid_at')}),
        ('Razorpay IDs', {'fields': ('razorpay_order_id', 'transaction_id', 'razorpay_signature')}),
        ('Webhook', {'fields': ('webhook_event_id',), 'classes': ('collapse',)}),
        ('Audit', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )
