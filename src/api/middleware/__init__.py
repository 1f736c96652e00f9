"""
API Middleware - Request/response processing

Request logging runs around every request; the auth dependency and the
exception handlers turn core errors into HTTP responses.
"""
