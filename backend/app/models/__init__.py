from app.models.classroom import Classroom  # noqa: F401
from app.models.schedule import Schedule  # noqa: F401
from app.models.school_class import SchoolClass, Section  # noqa: F401
from app.models.student import Student  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
