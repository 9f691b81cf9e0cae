from django.urls import path
from . import views

urlpatterns = [
    path('rooms/', views.create_room, name='create_room'),
    # Owner route first so "owner" is never taken for a room id
    path('rooms/owner/<str:token>/', views.owner_room_detail, name='owner_room_detail'),
    path('rooms/<str:room_id>/', views.room_detail, name='room_detail'),
    path('rooms/<str:room_id>/bids/', views.place_bid, name='place_bid'),
    path('rooms/<str:room_id>/close/', views.close_auction, name='close_auction'),
    path('uploads/images/', views.upload_image, name='upload_image'),
]
