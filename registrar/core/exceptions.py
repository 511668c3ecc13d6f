# registrar/core/exceptions.py - Domain errors raised by the service layer
#
# Routers translate these into HTTP responses; transaction failures carry a
# generic message only, the cause is logged where it happens.


class RegistrarError(Exception):
    """Base class for registration office errors"""

    def __init__(self, message: str = "Registration office error"):
        super().__init__(message)
        self.message = message


class StudentNotFoundError(RegistrarError):
    def __init__(self, matricule: str):
        super().__init__(f"Student {matricule} not found")
        self.matricule = matricule


class UploadRejectedError(RegistrarError):
    """An uploaded file was refused before any database work"""

    def __init__(self, message: str, too_large: bool = False):
        super().__init__(message)
        self.too_large = too_large


class EnrollmentError(RegistrarError):
    def __init__(self):
        super().__init__("Enrollment failed")


class ReEnrollmentError(RegistrarError):
    def __init__(self):
        super().__init__("Re-enrollment failed")


class PaymentNotFoundError(RegistrarError):
    def __init__(self, payment_id):
        super().__init__(f"Payment {payment_id} not found")
        self.payment_id = payment_id


class PaymentStateError(RegistrarError):
    """Requested payment status transition is not allowed"""
    pass


class DuplicateUserError(RegistrarError):
    pass
