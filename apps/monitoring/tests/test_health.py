from unittest import mock

from django.core.cache import cache
from django.test import TestCase

from tests.factories import ComplaintFactory


class HealthEndpointTests(TestCase):

    def test_health(self):
        response = self.client.get('/health/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(set(data['checks']), {'database', 'cache'})

    def test_cache_outage_reports_unhealthy(self):
        with mock.patch('apps.monitoring.views.cache') as cache:
            cache.get.return_value = None
            response = self.client.get('/health/')
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['checks']['cache']['status'], 'unhealthy')

    def test_liveness_and_readiness(self):
        self.assertEqual(self.client.get('/health/live/').json()['status'], 'alive')
        self.assertEqual(self.client.get('/health/ready/').json()['status'], 'ready')

    def test_metrics(self):
        cache.clear()
        ComplaintFactory()
        response = self.client.get('/health/metrics/')
        self.assertIn('ecare_complaints_total 1', response.json()['metrics'])
