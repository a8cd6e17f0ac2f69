from collabill.models.enums import Role

# global (team-wide) permissions; project access is decided by membership
PERMS: dict[str, set[Role]] = {
    "users:list": {Role.OWNER},
    "users:rates": {Role.OWNER},

    "invitations:create": {Role.OWNER},

    "invoices:read_all": {Role.OWNER},
    "invoices:validate": {Role.OWNER},
    "invoices:pay": {Role.OWNER},
}
