#!/usr/bin/env python3

# Imports {{{
# builtins
from enum import Enum

# }}}


class OperationKind(Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    MARK_UNREAD = "mark unread"


class ChangeEvent(Enum):
    RootUpdated = "root updated"
    Outdated = "outdated"
    New = "new"
    Changed = "changed"
