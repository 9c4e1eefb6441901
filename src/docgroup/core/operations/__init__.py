from docgroup.core.operations.create import CreateOperation
from docgroup.core.operations.delete import DeleteOperation, DeleteQuery
from docgroup.core.operations.read import EntityQuery, ReadOperation
from docgroup.core.operations.update import UpdateOperation, UpdateQuery

__all__ = [
    "CreateOperation",
    "DeleteOperation",
    "DeleteQuery",
    "EntityQuery",
    "ReadOperation",
    "UpdateOperation",
    "UpdateQuery",
]
