# consent/exceptions.py

class ConsentNotFound(Exception):
    """Raised when a consent id does not exist"""

    def __init__(self, consent_id):
        self.consent_id = consent_id
        super().__init__(f"Consent {consent_id} not found")


class ConsentStateError(Exception):
    """Raised when a consent cannot move to the requested state"""

    def __init__(self, consent_id, status):
        self.consent_id = consent_id
        self.status = status
        super().__init__(f"Consent {consent_id} is {status} and cannot be revoked")
