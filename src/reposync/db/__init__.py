"""reposync storage layer — SQLite + sqlite-vec."""

from reposync.db.connection import Database
from reposync.db.index import SemanticIndex
from reposync.db.ledger import CommitLedger
from reposync.db.migrations import MIGRATIONS, run_migrations
from reposync.db.repository import Repository
from reposync.db.schema import initialize

__all__ = [
    "Database",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
    "CommitLedger",
    "Repository",
    "SemanticIndex",
]
