"""Student Portal package.

This package is organized by feature modules (users, sessions, students,
metrics, reports, timetable) with a thin Flask controller layer over
service/repository layers.
"""
