"""@string macro support."""


class CaseInsensitiveDict:
    """A dictionary with case-insensitive keys."""

    def __init__(self, initial_data=None):
        self._data = {}
        if initial_data:
            for key, value in initial_data.items():
                self[key] = value

    def __setitem__(self, key, value):
        self._data[key.lower()] = value

    def __getitem__(self, key):
        return self._data[key.lower()]

    def get(self, key, default=None):
        return self._data.get(key.lower(), default)


class MacroTable:
    """Macros defined by ``@string`` plus the predefined month names.

    One table lives for exactly one ``parse()`` call.
    """

    PREDEFINED = {
        "jan": "January",
        "feb": "February",
        "mar": "March",
        "apr": "April",
        "may": "May",
        "jun": "June",
        "jul": "July",
        "aug": "August",
        "sep": "September",
        "oct": "October",
        "nov": "November",
        "dec": "December",
    }

    def __init__(self):
        self.macros = CaseInsensitiveDict(self.PREDEFINED)

    def define(self, name: str, value: str) -> None:
        self.macros[name] = value

    def resolve(self, name: str) -> str | None:
        """Expansion of a macro, or None when undefined."""
        return self.macros.get(name)
