"""
WaniSync Constants Module

This module provides centralized constants for the WaniSync application.
All magic values and configuration constants are defined here.
"""

from .api import Endpoints, QueryParams, ResourceFields, WaniKaniAPI
from .cache import CacheKeys, CacheLayout
from .cli import CLICommands, CLIDefaults, CLIHelp
from .http_codes import HTTPHeaders, HTTPStatusCodes
from .leeches import LeechDefaults, SubjectTypes

__all__ = [
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
    "CacheKeys",
    "CacheLayout",
    "Endpoints",
    "HTTPHeaders",
    "HTTPStatusCodes",
    "LeechDefaults",
    "QueryParams",
    "ResourceFields",
    "SubjectTypes",
    "WaniKaniAPI",
]
