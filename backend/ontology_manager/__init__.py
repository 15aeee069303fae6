"""
Ontology Manager Backend API

A FastAPI backend and client library for managing ontology records.
"""

__version__ = "1.0.0"
__author__ = "Ontology Manager Team"
__description__ = "Ontology record management API"
