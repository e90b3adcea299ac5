"""Fixtures for generator tests."""

import pytest

from bibconv.core.entry_types import CslType
from bibconv.core.models import Entry, Name, PartialDate


@pytest.fixture
def article_entry():
    """Journal article with names, a full date and special characters."""
    return Entry(
        id="smith2024",
        type=CslType.ARTICLE_JOURNAL,
        author=(Name(family="Smith", given="John"), Name(family="Doe", given="Jane")),
        title="Müller & Sons: A Study",
        container_title="Nature",
        issued=PartialDate.from_parts(2024, 3, 15),
        volume="42",
        page="100-110",
        doi="10.1000/a_b",
        url="https://x.org/?q=1%20",
        keyword="genomics; rna",
    )


@pytest.fixture
def dataset_entry():
    """Dataset without a BibTeX type of its own."""
    return Entry(
        id="noaa2023",
        type=CslType.DATASET,
        author=(Name(literal="NOAA"),),
        title="Sea Surface Temperatures",
        issued=PartialDate.from_parts(2023),
        publisher="NOAA",
    )
