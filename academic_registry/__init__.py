"""
Academic Registry: a permissioned registry of academic records.

Institutions issue courses, disciplines, enrollments and grades; students
decide who may read their protected data.
"""

__version__ = "1.0.0"
__description__ = "Permissioned academic-record registry"
