from rest_framework.throttling import AnonRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    """Per-client limit on login attempts (``DEFAULT_THROTTLE_RATES['login']``)."""
    scope = 'login'
