import pytest

from dynagrad import use_tape


@pytest.fixture(autouse=True)
def tape():
    """Every test builds its graphs on a fresh tape."""
    with use_tape() as t:
        yield t
