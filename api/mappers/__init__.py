"""Conversion between ORM entities and service schemas.

Each entity has a module with the same four functions:
    to_entity(create_input)       -> new entity, relationships left unset
    to_response(entity)           -> response schema with FK scalars only
    to_response_list(entities)    -> list of responses (empty in, empty out)
    apply_update(update, entity)  -> in-place partial update

Mappers never touch the database. The service layer resolves owner and
project IDs into validated references before persisting.
"""

from mappers import project_mapper, task_mapper, user_mapper
from mappers.utils import as_utc

__all__ = ["as_utc", "project_mapper", "task_mapper", "user_mapper"]
