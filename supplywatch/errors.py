# supplywatch/errors.py


class SupplyWatchError(Exception):
    """Basisklasse; status_code wird vom Exception-Handler in main.py genutzt."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SupplyWatchError):
    status_code = 400


class NoArticlesFound(SupplyWatchError):
    status_code = 400


class NotFoundError(SupplyWatchError):
    status_code = 404


class ScrapeInProgress(SupplyWatchError):
    status_code = 409
