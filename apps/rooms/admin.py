from django.contrib import admin
from .models import Room, Bid


class BidInline(admin.TabularInline):
    model = Bid
    extra = 0
    can_delete = False
    readonly_fields = ('id', 'amount', 'bidder_email', 'created_at')


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ('title', 'plan_type', 'is_paid', 'deadline', 'winning_bid', 'created_at')
    list_filter = ('plan_type', 'is_paid')
    search_fields = ('title', 'seller_email')
    readonly_fields = ('id', 'is_paid', 'payment_session_id', 'payment_price_id', 'highest_amount', 'winning_bid', 'created_at')
    exclude = ('owner_token',)
    inlines = [BidInline]
