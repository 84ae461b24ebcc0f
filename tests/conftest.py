import pytest

from restclient import reader

# Captured before test modules are imported, since importing an integration
# registers its reader.
DEFAULT_READERS = dict(reader._READERS)


def _reset_entity_readers():
    reader._READERS.clear()
    reader._READERS.update(DEFAULT_READERS)


@pytest.fixture(autouse=True)
def default_entity_readers():
    _reset_entity_readers()
    yield
    _reset_entity_readers()
