"""Role-based permission sets."""

from practicedesk.db.enums.auth import Role

# Roles that can assign/unassign firms to team members
ROLES_CAN_ASSIGN = {Role.OWNER, Role.MANAGER}

# Roles that can approve or reject a task awaiting approval
ROLES_CAN_APPROVE = {Role.OWNER, Role.MANAGER}

# Roles that can delete tasks in their scope
ROLES_CAN_DELETE_TASKS = {Role.OWNER, Role.MANAGER, Role.INDIVIDUAL}

# Roles whose own id is their organization root
ROLES_ORGANIZATION_ROOT = {Role.OWNER, Role.INDIVIDUAL}

# Roles that can add team members and change their role, reports_to or status
ROLES_CAN_MANAGE_TEAM = {Role.OWNER}

# Roles that can create and edit clients and firms
ROLES_CAN_MANAGE_CLIENTS = {Role.OWNER, Role.MANAGER, Role.INDIVIDUAL}

# Roles a team member may be given by the Owner
ROLES_TEAM_MEMBER = {Role.MANAGER, Role.STAFF}
