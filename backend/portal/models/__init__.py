# Models package
from .user import User
from .employee import EmployeeProfile
from .project import Project, Milestone
from .deliverable import Deliverable
from .renewal import Renewal
