"""Exceptions raised by the diet engine and its lookup services."""


class DietEngineError(Exception):
    """Base class for every engine failure."""


class LookupUnavailableError(DietEngineError):
    """A read-only upstream lookup could not be served."""


class CatalogUnavailableError(LookupUnavailableError):
    pass


class ExclusionTableUnavailableError(LookupUnavailableError):
    pass


class HistoryUnavailableError(LookupUnavailableError):
    pass
