from migrations.manifest import Address, Deploy, Migration, step_number

migration = Migration(
    number=step_number(__file__),
    label="Roles Library",
    status="#deployed",
    actions=[
        Deploy("Roles2Library", (Address("Storage"), "Roles2Library")),
    ],
)
