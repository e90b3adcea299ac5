"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and config lookup for each test.

    This prevents test pollution where one test's environment
    changes affect other tests, and keeps user config files out.
    """
    original_env = os.environ.copy()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("BIBCONV_INDENT", raising=False)
    monkeypatch.delenv("BIBCONV_SORT", raising=False)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def sample_bibtex():
    """Two BibTeX entries with a macro and a nested-brace title."""
    return """
@string{nat = "Nature"}

@article{smith2024,
    author = {Smith, John and Doe, Jane},
    title = {The {RNA} World},
    journal = nat,
    year = {2024},
    month = mar,
    volume = {42},
    pages = {100--110},
    doi = {10.1000/xyz123}
}

@book{knuth1984,
    author = {Knuth, Donald E.},
    title = {The {\\TeX}book},
    publisher = {Addison-Wesley},
    address = {Reading, MA},
    year = 1984
}
"""


@pytest.fixture
def sample_ris():
    """Two RIS records."""
    return (
        "TY  - JOUR\n"
        "AU  - Smith, John\n"
        "AU  - Doe, Jane\n"
        "TI  - Test Article\n"
        "JO  - Nature\n"
        "PY  - 2024/03/15\n"
        "SP  - 100\n"
        "EP  - 110\n"
        "KW  - genomics\n"
        "KW  - rna\n"
        "ER  - \n"
        "\n"
        "TY  - BOOK\n"
        "AU  - Knuth, Donald E.\n"
        "TI  - The TeXbook\n"
        "PB  - Addison-Wesley\n"
        "PY  - 1984\n"
        "SN  - 0-201-13447-0\n"
        "ER  - \n"
    )


@pytest.fixture
def sample_csl():
    """CSL-JSON array with two items."""
    return """[
  {
    "id": "smith2024",
    "type": "article-journal",
    "title": "Test Article",
    "author": [{"family": "Smith", "given": "John"}],
    "container-title": "Nature",
    "issued": {"date-parts": [[2024, 3]]},
    "volume": "42",
    "page": "100-110",
    "DOI": "10.1000/xyz123"
  },
  {
    "id": "data2023",
    "type": "dataset",
    "title": "Sea Surface Temperatures",
    "author": [{"literal": "NOAA"}],
    "issued": {"date-parts": [[2023]]}
  }
]"""


@pytest.fixture
def sample_endnote():
    """EndNote XML export with one styled record."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<xml>
  <records>
    <record>
      <database name="My Library.enl">My Library.enl</database>
      <ref-type name="Journal Article">17</ref-type>
      <contributors>
        <authors>
          <author><style face="normal">Smith, John</style></author>
          <author>Doe, Jane</author>
        </authors>
      </contributors>
      <titles>
        <title><style face="normal">Test Article</style></title>
        <secondary-title>Nature</secondary-title>
      </titles>
      <pages>100-110</pages>
      <volume>42</volume>
      <keywords>
        <keyword>genomics</keyword>
        <keyword>rna</keyword>
      </keywords>
      <dates>
        <year>2024</year>
        <pub-dates><date>March</date></pub-dates>
      </dates>
      <urls>
        <related-urls>
          <url>https://example.org/a</url>
          <url>https://example.org/b</url>
        </related-urls>
      </urls>
      <custom1>lab copy</custom1>
    </record>
  </records>
</xml>
"""
