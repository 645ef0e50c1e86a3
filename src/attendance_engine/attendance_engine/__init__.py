"""Attendance Engine package.

Feature modules (attendance, leave, settings, employees, ...) each expose a thin
Flask controller on top of service/repository layers. Face recognition and photo
storage are external collaborators reached through small protocols.
"""
