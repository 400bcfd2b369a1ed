from __future__ import annotations


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(ServiceError):
    status_code = 400


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    status_code = 409


def clean_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_email(value) -> str:
    return clean_text(value).lower()
