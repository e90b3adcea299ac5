"""Fixtures for operations tests."""

import pytest

from bibconv.core.entry_types import CslType
from bibconv.core.models import Entry, Name, PartialDate


@pytest.fixture
def entries():
    """Three entries with different authors, years and types."""
    return [
        Entry(
            id="smith2020",
            type=CslType.ARTICLE_JOURNAL,
            author=(Name(family="Smith", given="Jane"),),
            title="Quantum Widgets",
            issued=PartialDate.from_parts(2020),
            doi="10.1000/ABC",
            keyword="physics; widgets",
        ),
        Entry(
            id="adams2022",
            type=CslType.BOOK,
            author=(Name(family="Adams", given="Douglas"),),
            title="Towels",
            issued=PartialDate.from_parts(2022),
        ),
        Entry(
            id="noaa2021",
            type=CslType.DATASET,
            author=(Name(literal="NOAA"),),
            title="Sea Surface Temperatures",
            issued=PartialDate.from_parts(2021),
            keyword="climate",
        ),
    ]
