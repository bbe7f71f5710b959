import services.user_management.models  # noqa: F401  (Student, Subject, User must be mapped first)
from .assessments import Assessment, AssessmentStatus, SubjectAssessment
