from migrations.manifest import (
    Address,
    Deploy,
    GiveAccess,
    Migration,
    SetupEventsHistory,
    step_number,
)

# "UserContract" resolves to USER_CONTRACT, any contract built on Roles2LibraryAdapter
migration = Migration(
    number=step_number(__file__),
    label="UserContract",
    status="#deployed #initialized",
    actions=[
        Deploy("UserContract", (Address("Roles2Library"),)),
        SetupEventsHistory("UserContract", Address("UserContract"), option="events_history"),
        GiveAccess("StorageManager", Address("UserContract"), "UserContract",
                   option="user_contract_storage_access"),
    ],
)
