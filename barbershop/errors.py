# barbershop/errors.py


class SchedulingError(Exception):
    """Base for every failure the scheduling engine reports to callers."""

    code = "scheduling_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Malformed input: bad phone, missing field, empty service set..."""

    code = "validation_error"
    status_code = 422


class NotFoundError(SchedulingError):
    code = "not_found"
    status_code = 404


class SlotConflictError(SchedulingError):
    """The requested interval overlaps a booking already in the ledger."""

    code = "slot_conflict"
    status_code = 409


class TransientStoreError(SchedulingError):
    """Storage unavailable or lock timeout. Safe to re-submit."""

    code = "transient_store_error"
    status_code = 503


STATUS_BY_CODE = {
    cls.code: cls.status_code
    for cls in (ValidationError, NotFoundError, SlotConflictError, TransientStoreError)
}
