from django.contrib import admin
from .models import Car, Dealer


class CarInline(admin.TabularInline):
    model = Car
    extra = 0
    fields = ['make', 'model', 'variant', 'price', 'is_available']


@admin.register(Dealer)
class DealerAdmin(admin.ModelAdmin):
    list_display = ['business_name', 'city', 'user', 'phone', 'created_at']
    search_fields = ['business_name', 'city', 'user__email']
    readonly_fields = ['id', 'created_at', 'updated_at', 'delisted_at']
    inlines = [CarInline]


@admin.register(Car)
class CarAdmin(admin.ModelAdmin):
    list_display = ['make', 'model', 'variant', 'dealer', 'price', 'is_available']
    list_filter = ['is_available', 'make']
    search_fields = ['make', 'model', 'variant', 'dealer__business_name']
    readonly_fields = ['id', 'created_at', 'updated_at', 'delisted_at']

    def get_queryset(self, request):
        return Car.all_objects.select_related('dealer')
