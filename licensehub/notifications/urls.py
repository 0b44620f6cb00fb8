from django.urls import path
from .views import notification_list, notification_mark_read

urlpatterns = [
    path('notification/', notification_list, name='notification-list'),
    path('notification/<uuid:pk>/read/', notification_mark_read, name='notification-mark-read'),
]
