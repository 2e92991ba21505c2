from migrations.contracts import Roles
from migrations.manifest import (
    AccountAt,
    AddRoleCapability,
    AddUserRole,
    Migration,
    SetPublicCapability,
    step_number,
)

migration = Migration(
    number=step_number(__file__),
    label="System roles",
    status="#setup",
    actions=[
        # Open protected function for any caller
        SetPublicCapability("Roles2Library", "UserContract", "setRoles2Library", True),
        # Allow only listed roles to call protected functions
        AddRoleCapability("Roles2Library", Roles.ADMIN, "UserContract", "setRoles2Library"),
        AddRoleCapability("Roles2Library", Roles.MODERATOR, "UserContract", "setRoles2Library"),
        AddUserRole("Roles2Library", AccountAt(0), Roles.USER),
    ],
)
