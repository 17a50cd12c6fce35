# tests/test_init_db.py
from sqlalchemy import inspect

from kemotown.db.session import engine
from kemotown.init_db import init_db


def test_init_db_creates_tables() -> None:
    init_db(reset=True)
    tables = set(inspect(engine).get_table_names())
    assert {"user_account", "follow", "context", "membership", "activity", "inbox_item"} <= tables
