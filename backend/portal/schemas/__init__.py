from .auth import Credentials, UserOut, AuthResponse
from .employee import (
    EmployeeProfile, EmployeeProfileCreate, EmployeeProfileUpdate,
    ProjectDescriptor, MilestoneDescriptor,
)
from .project import (
    Project, ProjectWithMilestones, ProjectUpdate, ProjectFields,
    Milestone, MilestoneFields, MilestoneSummary,
)
from .deliverable import Deliverable, DeliverableRow, DeliverableView, DeliverableUpdate
from .renewal import Renewal, RenewalCreate, RenewalUpdate, RenewalRow

__all__ = [
    "Credentials", "UserOut", "AuthResponse",
    "EmployeeProfile", "EmployeeProfileCreate", "EmployeeProfileUpdate",
    "ProjectDescriptor", "MilestoneDescriptor",
    "Project", "ProjectWithMilestones", "ProjectUpdate", "ProjectFields",
    "Milestone", "MilestoneFields", "MilestoneSummary",
    "Deliverable", "DeliverableRow", "DeliverableView", "DeliverableUpdate",
    "Renewal", "RenewalCreate", "RenewalUpdate", "RenewalRow",
]
