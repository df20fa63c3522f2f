"""
UI Module - User-facing interfaces for Pattern Responder
"""
