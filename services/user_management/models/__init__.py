from .users import User, UserRole
from .archived_users import ArchivedUser
from .classes import SchoolClass, class_subjects
from .subjects import Subject
from .students import Student
