from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('', views.NotificationListAPIView.as_view(), name='api_list'),
    path('count/', views.NotificationCountAPIView.as_view(), name='api_count'),
    path('mark-read/', views.NotificationMarkReadAPIView.as_view(), name='api_mark_all_read'),
    path('<str:notification_id>/mark-read/', views.NotificationMarkReadAPIView.as_view(), name='api_mark_read'),
]
