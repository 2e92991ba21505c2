from migrations.manifest import (
    AccountAt,
    Address,
    GiveAccess,
    Migration,
    SetRootUser,
    SetupEventsHistory,
    step_number,
)

migration = Migration(
    number=step_number(__file__),
    label="Roles2Library",
    status="#initialized",
    actions=[
        GiveAccess("StorageManager", Address("Roles2Library"), "Roles2Library"),
        # Roles2Library acts as its own events history unless a MultiEventsHistory is wired in
        SetupEventsHistory("Roles2Library", Address("Roles2Library"), option="events_history"),
        SetRootUser("Roles2Library", AccountAt(0), True),
    ],
)
