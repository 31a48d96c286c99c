import pytest

from dal.history_dal import KeyValueDAL
from services.history_store import ResultStore
from utils.database_init import AsyncDatabaseInitializer


@pytest.fixture
def db_initializer(tmp_path):
    return AsyncDatabaseInitializer(tmp_path / "database")


@pytest.fixture
def dal(db_initializer):
    return KeyValueDAL(db_initializer)


@pytest.fixture
def store(dal):
    return ResultStore(dal)
