class CommerceUnavailable(Exception):
    """No authenticated commerce session, or the commerce API call failed"""


class CommerceAuthError(Exception):
    """OAuth install/callback request failed verification"""
