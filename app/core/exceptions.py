"""
Пользовательские исключения для централизованной обработки ошибок
"""

from typing import Optional, Dict, Any


class BaseAppException(Exception):
    """Базовое исключение приложения"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


# === Ошибки валидации ===
class ValidationError(BaseAppException):
    """Ошибка валидации данных"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 400, "VALIDATION_ERROR", details)


# === Ошибки ресурсов ===
class NotFoundError(BaseAppException):
    """Ресурс не найден (или принадлежит другому клубу)"""

    def __init__(self, resource: str, identifier: str = None):
        if identifier:
            message = f"{resource} with identifier '{identifier}' not found"
            details = {"resource": resource, "identifier": identifier}
        else:
            message = f"{resource} not found"
            details = {"resource": resource}
        super().__init__(message, 404, "NOT_FOUND", details)


# === Бизнес-логика ===
class CapacityExceededError(BaseAppException):
    """Занятие заполнено"""

    def __init__(self, class_id: int, occurrence_date: str, capacity: int):
        details = {
            "class_id": class_id,
            "date": occurrence_date,
            "capacity": capacity,
        }
        super().__init__("Class is full", 409, "CAPACITY_EXCEEDED", details)


class UnauthorizedError(BaseAppException):
    """Нет активного абонемента"""

    def __init__(
        self,
        message: str = "No active membership",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, 403, "UNAUTHORIZED", details)


class InvalidStateError(BaseAppException):
    """Переход состояния абонемента невозможен"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 409, "INVALID_STATE", details)


# === Ошибки базы данных ===
class DatabaseError(BaseAppException):
    """Ошибка базы данных"""

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, 500, "DATABASE_ERROR", details)


class DatabaseConnectionError(BaseAppException):
    """Ошибка подключения к базе данных"""

    def __init__(self, message: str = "Database connection failed"):
        super().__init__(message, 503, "DATABASE_CONNECTION_ERROR")


class DatabaseTimeoutError(BaseAppException):
    """Таймаут операции с базой данных"""

    def __init__(self, operation: str, timeout: int):
        message = f"Database operation '{operation}' timed out after {timeout}s"
        details = {"operation": operation, "timeout": timeout}
        super().__init__(message, 504, "DATABASE_TIMEOUT", details)


class DatabaseIntegrityError(BaseAppException):
    """Ошибка целостности данных"""

    def __init__(self, constraint: str, details: Optional[Dict[str, Any]] = None):
        message = f"Database integrity constraint violated: {constraint}"
        error_details = {"constraint": constraint}
        if details:
            error_details.update(details)
        super().__init__(message, 409, "DATABASE_INTEGRITY_ERROR", error_details)


# === Ошибки конфигурации ===
class ConfigurationError(BaseAppException):
    """Ошибка конфигурации"""

    def __init__(self, parameter: str, message: str = None):
        message = (
            message or f"Configuration parameter '{parameter}' is invalid or missing"
        )
        details = {"parameter": parameter}
        super().__init__(message, 500, "CONFIGURATION_ERROR", details)
