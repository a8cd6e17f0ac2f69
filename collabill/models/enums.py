from enum import Enum

class Role(str, Enum):
    OWNER = "OWNER"
    COLLABORATOR = "COLLABORATOR"

class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    BLOCKED = "BLOCKED"
    VALIDATED = "VALIDATED"
    TRASH = "TRASH"

# one rate column per size on collaborator_rates
class TaskSize(str, Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"

class InvoiceStatus(str, Enum):
    DRAFT = "DRAFT"
    VALIDATED = "VALIDATED"
    PAID = "PAID"

class InvoiceLineType(str, Enum):
    PRESENCE = "PRESENCE"
    TASK = "TASK"
