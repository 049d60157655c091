"""Registration index storage — engine, ORM models, and repositories."""

from jobs_board.infrastructure.database.engine import (
    close_index_db,
    create_tables,
    get_session_factory,
    init_index_db,
    make_session_factory,
)
from jobs_board.infrastructure.database.orm_models import (
    AgentRegistration,
    Base,
    IndexCursor,
)
from jobs_board.infrastructure.database.repositories import (
    CursorRepository,
    RegistrationRepository,
)

__all__ = [
    "AgentRegistration",
    "Base",
    "IndexCursor",
    "CursorRepository",
    "RegistrationRepository",
    "close_index_db",
    "create_tables",
    "get_session_factory",
    "init_index_db",
    "make_session_factory",
]
