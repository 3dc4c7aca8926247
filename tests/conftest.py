from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from factories import make_settings


@pytest.fixture
def db_session():
    """Mock database session."""
    return MagicMock()


@pytest.fixture
def relay_settings():
    return make_settings()


@pytest.fixture
def notebook_id():
    return str(uuid4())
