# Import every model module so the mappers are configured together.
from clinic.models.directory_models import Specialty, Doctor, Patient, Location, Staff  # noqa: F401
from clinic.models.schedule_models import ScheduleSlot  # noqa: F401
from clinic.models.appointment_models import Appointment  # noqa: F401
from clinic.models.clinical_models import MedicalRecord  # noqa: F401
from clinic.models.billing_models import Bill, Payment  # noqa: F401
from clinic.models.system_models import AuditEntry  # noqa: F401
