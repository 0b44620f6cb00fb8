from django.urls import path
from .views import procurement_list_create, procurement_detail

urlpatterns = [
    path('procurement/', procurement_list_create, name='procurement-list-create'),
    path('procurement/<uuid:pk>/', procurement_detail, name='procurement-detail'),
]
