"""
Tests for job record lookup endpoint.
"""
import pytest


class TestAdLookup:
    """Tests for GET /api/ads/<doc_id>."""

    def test_existing_job(self, client, fake_store):
        fake_store.create('user-ads', '1700000000000', {
            'docId': '1700000000000', 'userEmail': 'owner@example.com', 'status': 'pending'
        })
        response = client.get('/api/ads/1700000000000')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'pending'

    def test_missing_job_returns_404(self, client):
        response = client.get('/api/ads/does-not-exist')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Job not found'}

    def test_store_error_returns_500(self, client, fake_store):
        fake_store.fail_on.add('get')
        response = client.get('/api/ads/1700000000000')
        assert response.status_code == 500
