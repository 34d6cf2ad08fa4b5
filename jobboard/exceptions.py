"""Errors raised at the entity-client boundary."""


class RemoteRequestError(Exception):
    """Raised when any remote entity operation fails (transport, status or storage)."""
    pass


class EntityDecodeError(RemoteRequestError):
    """Raised when a remote payload does not match the expected entity schema"""

    def __init__(self, entity: str, errors: list | None = None, payload: object = None):
        self.entity = entity
        self.errors = errors or []
        self.payload = payload
        super().__init__(f"Malformed {entity} payload: {len(self.errors)} validation error(s)")


class DuplicateApplicationError(Exception):
    """Raised when an applicant already applied, or is applying, to the same job"""

    def __init__(self, job_id: str, applicant_id: str):
        self.job_id = job_id
        self.applicant_id = applicant_id
        super().__init__(f"{applicant_id} already applied to job {job_id}")
