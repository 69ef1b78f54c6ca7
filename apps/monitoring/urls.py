"""
Probe endpoints, mounted under /health/.
"""

from django.urls import path

from .views import HealthCheckView, LivenessView, MetricsView, ReadinessView

app_name = 'monitoring'

urlpatterns = [
    path('', HealthCheckView.as_view(), name='health'),
    path('live/', LivenessView.as_view(), name='live'),
    path('ready/', ReadinessView.as_view(), name='ready'),
    path('metrics/', MetricsView.as_view(), name='complaint-metrics'),
]
