from models.users import User, Role
from models.patient import PatientProfile
from models.doctor import DoctorProfile
from models.assignment import Assignment
from models.log import AuditLog

__all__ = ["User", "Role", "PatientProfile", "DoctorProfile", "Assignment", "AuditLog"]
