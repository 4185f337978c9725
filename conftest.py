# conftest.py
import pytest
from rest_framework.test import APIClient


@pytest.fixture
def api_client():
    """Unauthenticated DRF client"""
    return APIClient()


@pytest.fixture
def make_account(db):
    """Create accounts through the same helper the TestCase suites use"""
    from users.tests.helpers import make_user
    return make_user


@pytest.fixture
def patient(make_account):
    return make_account('patient', 'client', first_name='Pat', last_name='Client')


@pytest.fixture
def lawfirm(make_account):
    return make_account('lawfirm', 'lawfirm', first_name='Smith', last_name='Legal')


@pytest.fixture
def provider(make_account):
    return make_account('provider', 'medical_provider', first_name='City', last_name='Clinic')


@pytest.fixture
def client_for():
    """Build an APIClient authenticated as the given user"""
    def _client_for(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client_for
