# users/authentication.py
from rest_framework.authentication import TokenAuthentication


class BearerTokenAuthentication(TokenAuthentication):
    """
    Token authentication using the ``Authorization: Bearer <token>`` header.

    Tokens are issued by the external auth service and stored in
    rest_framework.authtoken; this class only verifies them.
    """
    keyword = 'Bearer'
