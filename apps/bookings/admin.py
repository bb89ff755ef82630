from django.contrib import admin
from .models import Booking, BookingStatusLog


class BookingStatusLogInline(admin.TabularInline):
    model = BookingStatusLog
    extra = 0
    readonly_fields = ['from_status', 'to_status', 'changed_by', 'reason', 'changed_at']
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = [
        'short_id', 'user', 'car', 'dealer', 'booking_date',
        'booking_status', 'payment_status', 'dealer_payment_status', 'platform_fee',
    ]
    list_filter = ['booking_status', 'payment_status', 'dealer_payment_status', 'booking_date']
    search_fields = ['user__email', 'user__username', 'car__make', 'car__model', 'dealer__business_name']
    # Status fields move only through the payment flow
    readonly_fields = [
        'id', 'booking_status', 'payment_status', 'created_at', 'updated_at',
    ]
    date_hierarchy = 'booking_date'
    inlines = [BookingStatusLogInline]
    fieldsets = (
        ('Booking', {'fields': ('id', 'user', 'car', 'dealer', 'booking_date', 'platform_fee')}),
        ('Status', {'fields': ('booking_status', 'payment_status')}),
        ('Dealer payout', {'fields': ('dealer_payment_status', 'dealer_payment_reference')}),
        ('Audit', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )

    def short_id(self, obj):
        return obj.id_short
    short_id.short_description = 'ID'


@admin.register(BookingStatusLog)
class BookingStatusLogAdmin(admin.ModelAdmin):
    list_display = ['booking', 'from_status', 'to_status', 'changed_by', 'changed_at']
    readonly_fields = ['id', 'booking', 'from_status', 'to_status', 'changed_by', 'reason', 'changed_at']
    search_fields = ['booking__user__email']
