"""Study Room API package.

This package is organized by feature modules (users, absences, qa, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
