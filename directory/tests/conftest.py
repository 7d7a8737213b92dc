import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _isolated_settings(settings, tmp_path):
    """Fast hashing, throwaway media directory, no outbound geocoding."""
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    settings.GEOCODING_ENABLE = False
    cache.clear()
    yield
    cache.clear()
