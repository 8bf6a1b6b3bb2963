from enum import Enum

class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"

class MovementType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
