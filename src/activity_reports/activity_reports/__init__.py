"""Activity Reports package.

This package is organized by feature modules (users, reports, comments,
attachments, dashboard) with a thin Flask controller layer and
service/repository layers underneath.
"""
