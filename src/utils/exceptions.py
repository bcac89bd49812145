from typing import List, Dict

from src.utils.loggers import logger

api_logger = logger


class BadRequestException(Exception):
    def __init__(self, message: str):
        self.message = message


class ValidationException(BadRequestException):
    def __init__(self, errors: List[Dict[str, str]], message: str = 'Validation error'):
        super().__init__(message)
        self.errors = errors


class NotFoundException(Exception):
    def __init__(self, message: str = 'Data tidak ditemukan'):
        self.message = message


class DBException(Exception):
    def __init__(self):
        self.message = 'Server error'


class DBDuplicateException(Exception):
    def __init__(self, message: str = 'Pelanggaran integritas: data yang sama sudah ada'):
        self.message = message
