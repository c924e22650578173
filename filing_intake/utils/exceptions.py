from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    FILE_UPLOAD_ERROR = "FILE_UPLOAD_ERROR"
    AI_ANALYSIS_ERROR = "AI_ANALYSIS_ERROR"
    SERVER_ERROR = "SERVER_ERROR"


class IntakeException(Exception):
    """Base exception for the filing intake service"""
    code = ErrorCode.SERVER_ERROR

class ValidationError(IntakeException):
    """Malformed or incomplete request, correctable by the user"""
    code = ErrorCode.VALIDATION_ERROR

class StorageError(IntakeException):
    """Upload storage backend failed; fatal to the request"""
    code = ErrorCode.FILE_UPLOAD_ERROR

class AnalysisError(IntakeException):
    """Analysis of a single document failed; captured per document"""
    code = ErrorCode.AI_ANALYSIS_ERROR
